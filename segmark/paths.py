"""Display names and default output file names derived from media paths."""

from segmark.models import Role


def file_name(path: str) -> str:
    """Last path component, accepting either slash style."""
    return path.replace("\\", "/").split("/")[-1]


def base_name(name: str) -> str:
    """Strip the final extension; dotfiles and extensionless names are kept."""
    dot = name.rfind(".")
    if dot <= 0:
        return name
    return name[:dot]


def _stem_for(media_reference: str, role: Role | str) -> str:
    return f"{base_name(file_name(media_reference))}_{Role(role).value}"


def default_project_name(media_reference: str, role: Role | str) -> str:
    return _stem_for(media_reference, role) + ".ann"


def default_export_name(media_reference: str, role: Role | str) -> str:
    return _stem_for(media_reference, role) + ".csv"
