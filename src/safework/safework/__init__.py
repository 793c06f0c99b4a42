"""SafeWork core package.

Feature modules (reports, reviews, points, attendance, ...) follow the same
shape: frozen dataclass models, Protocol repositories with MySQL
implementations, services holding the business rules, and a thin Flask
controller layer.
"""
