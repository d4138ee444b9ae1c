"""Exception types raised by tiny-mcvqe."""


class MCVQEError(Exception):
    """Base class for all tiny-mcvqe errors."""


class ConfigurationError(MCVQEError, ValueError):
    """Missing or invalid options, or unreadable/malformed site data.

    Always raised before any circuit is built; never retried.
    """


class DegenerateGeometryError(ConfigurationError):
    """Two coupled sites share the same center of mass."""

    def __init__(self, site_a: int, site_b: int):
        self.site_a = site_a
        self.site_b = site_b
        super().__init__(
            f"Sites {site_a} and {site_b} are at zero distance; "
            "the dipole-dipole coupling is undefined"
        )


class BackendError(MCVQEError, RuntimeError):
    """An execution backend failed to evaluate a circuit."""
