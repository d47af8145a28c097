"""Data types shared by the planner client, CLI and dashboard."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    text = str(value).strip()
    return [text] if text else []


def _as_text(value, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip() or default


@dataclass
class ProviderSettings:
    """What the user picked in the AI service panel."""
    provider: str = "claude"
    api_key: str = ""
    model: str = ""
    endpoint: str = ""

    def __post_init__(self):
        self.provider = (self.provider or "").strip().lower()


@dataclass
class DevelopmentPhase:
    phase: str
    description: str = ""
    tasks: List[str] = field(default_factory=list)
    estimated_hours: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DevelopmentPhase":
        if not isinstance(data, dict):
            return cls(phase=_as_text(data, "Phase"))
        return cls(
            phase=_as_text(data.get("phase"), "Phase"),
            description=_as_text(data.get("description")),
            tasks=_as_list(data.get("tasks")),
            estimated_hours=_as_text(data.get("estimatedHours")),
        )


@dataclass
class ProjectAnalysis:
    """The model's JSON analysis, normalized so templates can rely on every field."""
    project_type: str = ""
    project_name: str = "Untitled project"
    complexity: str = ""
    estimated_hours: str = ""
    main_features: List[str] = field(default_factory=list)
    technical_challenges: List[str] = field(default_factory=list)
    recommended_tech: List[str] = field(default_factory=list)
    development_phases: List[DevelopmentPhase] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    success_criteria: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectAnalysis":
        phases = data.get("developmentPhases") or []
        if not isinstance(phases, list):
            phases = [phases]
        return cls(
            project_type=_as_text(data.get("projectType")),
            project_name=_as_text(data.get("projectName"), "Untitled project"),
            complexity=_as_text(data.get("complexity")),
            estimated_hours=_as_text(data.get("estimatedHours")),
            main_features=_as_list(data.get("mainFeatures")),
            technical_challenges=_as_list(data.get("technicalChallenges")),
            recommended_tech=_as_list(data.get("recommendedTech")),
            development_phases=[DevelopmentPhase.from_dict(p) for p in phases],
            risk_factors=_as_list(data.get("riskFactors")),
            recommendations=_as_list(data.get("recommendations")),
            success_criteria=_as_list(data.get("successCriteria")),
            raw=dict(data),
        )


@dataclass
class PlanStep:
    id: str
    title: str
    type: str
    prompt: str


@dataclass
class Plan:
    analysis: ProjectAnalysis
    steps: List[PlanStep]
    type: str
    provider: Optional[str] = None
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form; the analysis is emitted as the model returned it."""
        return {
            "type": self.type,
            "provider": self.provider,
            "model": self.model,
            "analysis": self.analysis.raw or asdict(self.analysis),
            "steps": [asdict(step) for step in self.steps],
        }
