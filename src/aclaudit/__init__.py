"""AclAudit: folder permission export and reporting."""

__version__ = "1.0.0"
