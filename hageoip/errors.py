"""Fatal errors raised by the feed pipeline."""


class GeoIPError(Exception):
    """Base class for errors that abort the run."""


class TransportError(GeoIPError):
    """Feed or checksum source unreachable, or answered with an unexpected status."""


class IntegrityError(GeoIPError):
    def __init__(self, expected, calculated):
        self.expected = expected
        self.calculated = calculated
        super().__init__(
            "SHA256 mismatch! Downloaded file is corrupt.\n"
            f"  Expected:   {expected}\n"
            f"  Calculated: {calculated}"
        )


class ConfigError(GeoIPError):
    pass
