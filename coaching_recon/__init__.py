#Docstring for the package
"""
Coaching Settlement Reconciliation

This package contains the modules for:

- Loading order-export and coaching-registry Excel files
- Normalizing spreadsheet cell values
- Reconciling payments against coaching enrollments
- Detecting repeat enrollments and suspected same-person pairs
- Computing settlement statistics and building settlement workbooks

Subpackages:
- core
- engines
- visualization
- outputs

"""

#Import subpackages to be exposed at the package level
from . import core, engines, visualization, outputs
__all__ = [
    "core",
    "engines",
    "visualization",
    "outputs",
]
