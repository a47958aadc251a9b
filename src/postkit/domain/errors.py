class PostkitError(Exception):
    """Base error for postkit."""


class FrontmatterError(PostkitError):
    pass


class ConfigError(PostkitError):
    pass


class ProfileError(PostkitError):
    pass


class ExportError(PostkitError):
    pass
