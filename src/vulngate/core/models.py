"""Dependency data model shared by the engine, collector and evaluator.

Provides:
- Confidence: Confidence level attached to evidence and identifiers
- Evidence: Weighted clue used by the engine to identify a component
- Identifier: Normalized component coordinate
- Vulnerability: Known vulnerability with its CVSS score
- Dependency: One discovered software component
- ArtifactCoordinates: Module coordinates of an artifact resolved by the host build
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from vulngate.core.severity import score_from_vector, severity_label


class Confidence(str, Enum):
    """Confidence level, from strongest to weakest."""

    HIGHEST = "HIGHEST"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Evidence(BaseModel):
    """Single piece of evidence about a dependency.

    Attributes:
        source: Where the evidence came from (e.g. "gradle", "jar")
        field: Which property it describes ("vendor", "product", "version")
        value: Evidence value
        confidence: How much the engine should trust it
    """

    model_config = ConfigDict(frozen=True)

    source: str
    field: str
    value: str
    confidence: Confidence


class Identifier(BaseModel):
    """Component identifier such as a Maven coordinate, purl or CPE."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    value: str
    confidence: Confidence | None = None


class Vulnerability(BaseModel):
    """Known vulnerability reported by the engine.

    Attributes:
        name: Vulnerability name (e.g. "CVE-2021-44228")
        cvss_score: CVSS base score (0.0 - 10.0)
        cvss_vector: CVSS vector string, if the engine reported one
    """

    model_config = ConfigDict(frozen=True)

    name: str
    cvss_score: float = 0.0
    cvss_vector: str | None = None

    @classmethod
    def from_vector(cls, name: str, vector: str) -> "Vulnerability":
        """Build a vulnerability whose score is derived from a CVSS v3 vector."""
        return cls(name=name, cvss_score=score_from_vector(vector), cvss_vector=vector)

    @property
    def severity(self) -> str:
        return severity_label(self.cvss_score)


class Dependency(BaseModel):
    """Software component discovered by the engine.

    Identifiers, evidence and vulnerabilities keep insertion order; the
    summary renders them in that order.
    """

    file_name: str
    file_path: str = ""
    identifiers: list[Identifier] = Field(default_factory=list)
    evidence: list[Evidence] = Field(default_factory=list)
    vulnerabilities: list[Vulnerability] = Field(default_factory=list)
    project_references: set[str] = Field(default_factory=set)

    def add_evidence(self, source: str, field: str, value: str, confidence: Confidence) -> None:
        evidence = Evidence(source=source, field=field, value=value, confidence=confidence)
        if evidence not in self.evidence:
            self.evidence.append(evidence)

    def add_identifier(
        self, namespace: str, value: str, confidence: Confidence | None = None
    ) -> None:
        identifier = Identifier(namespace=namespace, value=value, confidence=confidence)
        if identifier not in self.identifiers:
            self.identifiers.append(identifier)

    def add_vulnerability(self, vulnerability: Vulnerability) -> None:
        self.vulnerabilities.append(vulnerability)

    def add_project_reference(self, name: str) -> None:
        self.project_references.add(name)


class ArtifactCoordinates(BaseModel):
    """Coordinates of an artifact resolved by the host build system.

    Any of group/name/version may be missing for file-only dependencies.
    """

    model_config = ConfigDict(frozen=True)

    group: str | None = None
    name: str | None = None
    version: str | None = None
    file: str | None = None

    @property
    def vendor(self) -> str | None:
        return self.group

    @property
    def product(self) -> str | None:
        return self.name

    @property
    def evidence_value(self) -> str:
        """``vendor:product:version`` with unknown parts left empty."""
        return ":".join(part or "" for part in (self.vendor, self.product, self.version))

    @property
    def coordinate(self) -> str | None:
        """``group:name:version`` when all three parts are known."""
        if self.group is None or self.name is None or self.version is None:
            return None
        return f"{self.group}:{self.name}:{self.version}"
