"""Build manifest describing the host build to analyze.

The host build system resolves its dependency groups and exports them as a
JSON manifest:

    {
      "host_version": "7.6",
      "project": {"name": "app", "group": "com.example", "version": "1.0",
                  "display_name": "root project 'app'"},
      "groups": [
        {"name": "runtimeClasspath",
         "hierarchy": ["runtimeClasspath", "runtime", "compile"],
         "can_be_resolved": true,
         "artifacts": [{"group": "org.slf4j", "name": "slf4j-api",
                        "version": "1.7.30", "file": "libs/slf4j-api-1.7.30.jar"}]}
      ]
    }

Provides:
- ProjectInfo: Project identity as reported by the host
- ProjectContext: Resolved project identity passed to the analysis run
- GroupSpec: Dependency group with its resolved artifacts
- BuildManifest: The whole manifest
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from vulngate.core.classifier import ConfigurationGroup
from vulngate.core.models import ArtifactCoordinates


class ProjectInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    group: str = ""
    version: str = "unspecified"
    display_name: str | None = None


class ProjectContext(BaseModel):
    """Project identity used for report metadata and log context."""

    model_config = ConfigDict(frozen=True)

    name: str
    group: str = ""
    version: str = "unspecified"
    display_name: str


class GroupSpec(ConfigurationGroup):
    artifacts: tuple[ArtifactCoordinates, ...] = ()


class BuildManifest(BaseModel):
    model_config = ConfigDict(frozen=True)

    host_version: str | None = None
    project: ProjectInfo
    groups: tuple[GroupSpec, ...] = Field(default_factory=tuple)
    base_dir: Path = Path(".")

    @classmethod
    def from_file(cls, path: str | Path) -> "BuildManifest":
        """Load a manifest; relative artifact files resolve against its directory."""
        manifest_path = Path(path)
        manifest = cls.model_validate_json(manifest_path.read_text(encoding="utf-8"))
        return manifest.model_copy(update={"base_dir": manifest_path.parent})

    def artifact_path(self, artifact: ArtifactCoordinates) -> Path | None:
        if artifact.file is None:
            return None
        file = Path(artifact.file)
        return file if file.is_absolute() else self.base_dir / file
