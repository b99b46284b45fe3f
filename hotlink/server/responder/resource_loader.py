import os
import pathlib


class ResourceLoader:
    """
    Resolves a request URL to a file under the project's resources
    directory. The platform-specific directory is tried before the shared
    one. Paths that resolve outside the resources directory are never read.
    """

    def __init__(
        self,
        url: str,
        project_dir: str,
        platform: str | None = None,
        resources_directory: str = "Resources",
    ) -> None:
        self.url = url
        self.project_dir = project_dir
        self.platform = platform
        self.resources_root = pathlib.Path(project_dir, resources_directory).resolve()

    @property
    def relative_path(self) -> str:
        path = self.url.split("?", 1)[0].split("#", 1)[0]
        return path.lstrip("/")

    @property
    def candidates(self) -> list[pathlib.Path]:
        relative_path = self.relative_path
        paths: list[pathlib.Path] = []

        if self.platform:
            paths.append(self.resources_root / self.platform / relative_path)

        paths.append(self.resources_root / relative_path)

        return paths

    def resolve(self) -> pathlib.Path | None:
        if not self.relative_path:
            return None

        for candidate in self.candidates:
            resolved = candidate.resolve()
            if not resolved.is_relative_to(self.resources_root):
                continue

            if resolved.is_file():
                return resolved

        return None

    @property
    def content(self) -> bytes | None:
        path = self.resolve()
        if path is None:
            return None

        try:
            with open(path, "rb") as resource:
                return resource.read()

        except OSError:
            return None

    def __repr__(self) -> str:
        return f"ResourceLoader({self.url!r}, {os.fspath(self.resources_root)!r})"
