"""Path resolution utilities for flexible file path configuration."""

from pathlib import Path

PROJECT_MARKERS = ("pyproject.toml", ".git")


def find_project_root(start: Path | None = None, max_levels: int = 10) -> Path:
    """Walk upward from ``start`` until a directory holding a project marker is found.

    Falls back to the last directory visited when no marker exists within
    ``max_levels`` parents.
    """
    current = (start or Path(__file__)).resolve()
    if current.is_file():
        current = current.parent

    for _ in range(max_levels):
        if any((current / marker).exists() for marker in PROJECT_MARKERS):
            return current
        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return current


def resolve_csv_path(csv_path_setting: str, project_root_fallback: Path | None = None) -> Path:
    """
    Resolve a CSV path with a flexible fallback strategy.

    Resolution logic:
    1. Absolute path → use directly (e.g., Docker mounts: /app/config/model_catalog.csv)
    2. Relative path (contains / or \\) → resolve from cwd (e.g., ./config/catalog.csv)
    3. Filename only → resolve from project_root_fallback or the detected project root

    Args:
        csv_path_setting: Path string from config/environment variable
        project_root_fallback: Project root directory. If None, auto-detects by
            navigating up from this file's location.

    Returns:
        Resolved Path object

    Examples:
        >>> resolve_csv_path("/app/config/model_catalog.csv")
        Path("/app/config/model_catalog.csv")

        >>> resolve_csv_path("./config/model_catalog.csv")
        Path("/current/working/dir/config/model_catalog.csv")

        >>> resolve_csv_path("model_catalog.csv")
        Path("/project/root/model_catalog.csv")
    """
    input_path = Path(csv_path_setting)

    if input_path.is_absolute():
        return input_path

    raw = str(csv_path_setting)
    if "/" in raw or "\\" in raw:
        return Path.cwd() / Path(raw.replace("\\", "/"))

    if project_root_fallback is None:
        project_root_fallback = find_project_root()

    return project_root_fallback / input_path
