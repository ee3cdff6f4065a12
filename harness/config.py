"""Configuration loading for harness (harness.yml plus global and local layers)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .guardrails.command_policy import find_alias_cycle
from .guardrails.loop_guard import DEFAULT_EDIT_THRESHOLD
from .logging import get_logger

DEFAULT_CONFIG_FILE = "harness.yml"
DEFAULT_LOCAL_FILE = ".harness/local.yml"
DEFAULT_GLOBAL_CONFIG_FILE = ".config/harness/config.yml"

DEFAULT_WEIGHTS: Dict[str, float] = {
    "context": 0.30,
    "tools": 0.25,
    "continuity": 0.20,
    "verification": 0.15,
    "repository_quality": 0.10,
}

SUPPORTED_PROFILES = ("general", "agent")

_WEIGHT_SUM_TOLERANCE = 0.001

logger = get_logger("config")


class LogSampling(Enum):
    MILESTONES = "milestones"
    ALL = "all"
    NONE = "none"


@dataclass
class ProjectConfig:
    """Project identity from the ``project`` section."""

    name: str
    profile: str = "general"
    language: Optional[str] = None
    main_branch: str = "main"


@dataclass
class ContextConfig:
    """Locations of agent context documents."""

    agents_map: Optional[str] = None
    context_index: Optional[str] = None
    doc_map_required: bool = False


@dataclass
class ToolBaseline:
    """Baseline tool inventory and forbidden command patterns."""

    read: List[str] = field(default_factory=list)
    write: List[str] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)
    forbidden: List[str] = field(default_factory=list)


@dataclass
class ToolDeprecated:
    """Deprecation lifecycle lists; a tool belongs to at most one of them."""

    observe: List[str] = field(default_factory=list)
    deprecated: List[str] = field(default_factory=list)
    disabled: List[str] = field(default_factory=list)


@dataclass
class ToolsConfig:
    baseline: ToolBaseline = field(default_factory=ToolBaseline)
    extra: List[str] = field(default_factory=list)
    deprecated: ToolDeprecated = field(default_factory=ToolDeprecated)
    aliases: Dict[str, str] = field(default_factory=dict)


@dataclass
class VerificationConfig:
    required: List[str] = field(default_factory=list)
    pre_completion_required: bool = False
    loop_guard_enabled: bool = False


@dataclass
class ContinuityConfig:
    """Continuity artifact paths and progress-log behaviour."""

    initializer: Optional[str] = None
    coding_prompt: Optional[str] = None
    progress_file: Optional[str] = None
    feature_state_file: Optional[str] = None
    log_sampling: LogSampling = LogSampling.MILESTONES
    batch_interval_secs: int = 60
    max_log_size_kb: int = 100
    retained_logs: int = 3


@dataclass
class MetricsConfig:
    weights: Dict[str, float] = field(default_factory=dict)
    max_risk_tolerance: Optional[float] = None
    max_penalty_per_bucket: Optional[float] = None


@dataclass
class WorkflowConfig:
    max_planned_edits: int = DEFAULT_EDIT_THRESHOLD


@dataclass(frozen=True)
class OptimizationThresholds:
    """Gates and uplift thresholds used by the optimize delta classifier."""

    min_traces: int = 30
    min_uplift_abs: float = 0.05
    min_uplift_rel: float = 0.10
    trace_staleness_days: int = 90
    task_overlap_threshold: float = 0.50


@dataclass
class HarnessConfig:
    """Merged configuration for one repository."""

    project: ProjectConfig
    context: ContextConfig = field(default_factory=ContextConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    verification: Optional[VerificationConfig] = None
    continuity: ContinuityConfig = field(default_factory=ContinuityConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    optimization: OptimizationThresholds = field(default_factory=OptimizationThresholds)
    sources: List[Path] = field(default_factory=list)

    @staticmethod
    def default_weights() -> Tuple[float, ...]:
        return tuple(DEFAULT_WEIGHTS.values())

    def weights(self) -> Tuple[float, ...]:
        """Return weights in category order, filling unspecified ones with defaults."""
        configured = self.metrics.weights
        return tuple(configured.get(name, default) for name, default in DEFAULT_WEIGHTS.items())

    def optimization_thresholds(self) -> OptimizationThresholds:
        return self.optimization

    def validate(self) -> None:
        """Raise ConfigError when the configuration is semantically invalid."""
        if self.project.profile not in SUPPORTED_PROFILES:
            raise ConfigError(f"unsupported project.profile: {self.project.profile}")

        unknown = sorted(set(self.metrics.weights) - set(DEFAULT_WEIGHTS))
        if unknown:
            raise ConfigError(f"unknown metrics.weights keys: {', '.join(unknown)}")
        weights = self.weights()
        if any(not 0.0 <= weight <= 1.0 for weight in weights):
            raise ConfigError("metrics.weights values must be between 0.0 and 1.0")
        weight_sum = sum(weights)
        if abs(weight_sum - 1.0) > _WEIGHT_SUM_TOLERANCE:
            raise ConfigError(f"metrics.weights must sum to 1.0 (found {weight_sum:.3f})")

        for key in ("max_risk_tolerance", "max_penalty_per_bucket"):
            value = getattr(self.metrics, key)
            if value is not None and not 0.0 <= value <= 1.0:
                raise ConfigError(f"metrics.{key} must be between 0.0 and 1.0")

        verification = self.verification
        if verification is not None and verification.pre_completion_required and not verification.required:
            raise ConfigError(
                "verification.required cannot be empty when pre_completion_required = true"
            )

        self._validate_deprecations()

        cycle = find_alias_cycle(self.tools.aliases)
        if cycle:
            raise ConfigError(f"tools.aliases contains a cycle: {' -> '.join(cycle)}")

        if self.workflow.max_planned_edits < 1:
            raise ConfigError("workflow.max_planned_edits must be at least 1")

        self._validate_thresholds()

    def _validate_deprecations(self) -> None:
        lists = self.tools.deprecated
        owners: Dict[str, str] = {}
        for stage in ("observe", "deprecated", "disabled"):
            for tool in getattr(lists, stage):
                previous = owners.setdefault(tool, stage)
                if previous != stage:
                    raise ConfigError(
                        f"tool '{tool}' appears in both tools.deprecated.{previous} "
                        f"and tools.deprecated.{stage}"
                    )

    def _validate_thresholds(self) -> None:
        thresholds = self.optimization
        if thresholds.min_traces < 1:
            raise ConfigError("optimization.min_traces must be at least 1")
        if not 0.0 <= thresholds.min_uplift_abs <= 1.0:
            raise ConfigError("optimization.min_uplift_abs must be between 0.0 and 1.0")
        if thresholds.min_uplift_rel < 0.0:
            raise ConfigError("optimization.min_uplift_rel must not be negative")
        if thresholds.trace_staleness_days < 0:
            raise ConfigError("optimization.trace_staleness_days must not be negative")
        if not 0.0 <= thresholds.task_overlap_threshold <= 1.0:
            raise ConfigError("optimization.task_overlap_threshold must be between 0.0 and 1.0")


def default_global_config_path() -> Path | None:
    try:
        return Path.home() / DEFAULT_GLOBAL_CONFIG_FILE
    except RuntimeError:
        return None


def load_config(root: Path) -> Optional[HarnessConfig]:
    """Load configuration for ``root`` using the user's global config as the base layer."""
    return load_config_with_global(root, default_global_config_path())


def load_config_with_global(root: Path, global_path: Path | None) -> Optional[HarnessConfig]:
    """Merge global, repository and local layers; return None when harness.yml is absent."""
    repo_path = root / DEFAULT_CONFIG_FILE
    if not repo_path.exists():
        logger.debug("No %s found in %s", DEFAULT_CONFIG_FILE, root)
        return None

    merged: Dict[str, Any] = {}
    sources: List[Path] = []
    for path in (global_path, repo_path, root / DEFAULT_LOCAL_FILE):
        if path is None or not path.is_file():
            continue
        _merge_mapping(merged, _read_config(path))
        sources.append(path)
        logger.debug("Merged configuration layer %s", path)

    config = parse_config(merged)
    config.sources = sources
    return config


def parse_config(data: Mapping[str, Any]) -> HarnessConfig:
    """Build a HarnessConfig from an already-merged mapping."""
    project_data = _section(data, "project")
    name = _as_str(project_data.get("name"), "project.name")
    if not name:
        raise ConfigError("project.name is required")
    project = ProjectConfig(
        name=name,
        profile=_as_str(project_data.get("profile"), "project.profile") or "general",
        language=_as_str(project_data.get("language"), "project.language"),
        main_branch=_as_str(project_data.get("main_branch"), "project.main_branch") or "main",
    )

    context_data = _section(data, "context")
    context = ContextConfig(
        agents_map=_as_str(context_data.get("agents_map"), "context.agents_map"),
        context_index=_as_str(context_data.get("context_index"), "context.context_index"),
        doc_map_required=_as_bool(context_data.get("doc_map_required"), "context.doc_map_required"),
    )

    tools_data = _section(data, "tools")
    baseline_data = _section(tools_data, "baseline", "tools.")
    specialized_data = _section(tools_data, "specialized", "tools.")
    deprecated_data = _section(tools_data, "deprecated", "tools.")
    tools = ToolsConfig(
        baseline=ToolBaseline(
            read=_as_str_list(baseline_data.get("read"), "tools.baseline.read"),
            write=_as_str_list(baseline_data.get("write"), "tools.baseline.write"),
            commands=_as_str_list(baseline_data.get("commands"), "tools.baseline.commands"),
            forbidden=_as_str_list(baseline_data.get("forbidden"), "tools.baseline.forbidden"),
        ),
        extra=_as_str_list(specialized_data.get("extra"), "tools.specialized.extra"),
        deprecated=ToolDeprecated(
            observe=_as_str_list(deprecated_data.get("observe"), "tools.deprecated.observe"),
            deprecated=_as_str_list(
                deprecated_data.get("deprecated"), "tools.deprecated.deprecated"
            ),
            disabled=_as_str_list(deprecated_data.get("disabled"), "tools.deprecated.disabled"),
        ),
        aliases=_as_str_mapping(tools_data.get("aliases"), "tools.aliases"),
    )

    verification = None
    if data.get("verification") is not None:
        verification_data = _section(data, "verification")
        verification = VerificationConfig(
            required=_as_str_list(verification_data.get("required"), "verification.required"),
            pre_completion_required=_as_bool(
                verification_data.get("pre_completion_required"),
                "verification.pre_completion_required",
            ),
            loop_guard_enabled=_as_bool(
                verification_data.get("loop_guard_enabled"), "verification.loop_guard_enabled"
            ),
        )

    continuity_data = _section(data, "continuity")
    defaults = ContinuityConfig()
    continuity = ContinuityConfig(
        initializer=_as_str(continuity_data.get("initializer"), "continuity.initializer"),
        coding_prompt=_as_str(continuity_data.get("coding_prompt"), "continuity.coding_prompt"),
        progress_file=_as_str(continuity_data.get("progress_file"), "continuity.progress_file"),
        feature_state_file=_as_str(
            continuity_data.get("feature_state_file"), "continuity.feature_state_file"
        ),
        log_sampling=_as_sampling(continuity_data.get("log_sampling")),
        batch_interval_secs=_as_int(
            continuity_data.get("batch_interval_secs"),
            "continuity.batch_interval_secs",
            defaults.batch_interval_secs,
        ),
        max_log_size_kb=_as_int(
            continuity_data.get("max_log_size_kb"),
            "continuity.max_log_size_kb",
            defaults.max_log_size_kb,
        ),
        retained_logs=_as_int(
            continuity_data.get("retained_logs"), "continuity.retained_logs", defaults.retained_logs
        ),
    )

    metrics_data = _section(data, "metrics")
    weights_data = _section(metrics_data, "weights", "metrics.")
    metrics = MetricsConfig(
        weights={
            str(key): _as_float(value, f"metrics.weights.{key}", 0.0)
            for key, value in weights_data.items()
        },
        max_risk_tolerance=_as_optional_float(
            metrics_data.get("max_risk_tolerance"), "metrics.max_risk_tolerance"
        ),
        max_penalty_per_bucket=_as_optional_float(
            metrics_data.get("max_penalty_per_bucket"), "metrics.max_penalty_per_bucket"
        ),
    )

    workflow_data = _section(data, "workflow")
    workflow = WorkflowConfig(
        max_planned_edits=_as_int(
            workflow_data.get("max_planned_edits"),
            "workflow.max_planned_edits",
            DEFAULT_EDIT_THRESHOLD,
        )
    )

    optimization_data = _section(data, "optimization")
    base = OptimizationThresholds()
    optimization = OptimizationThresholds(
        min_traces=_as_int(
            optimization_data.get("min_traces"), "optimization.min_traces", base.min_traces
        ),
        min_uplift_abs=_as_float(
            optimization_data.get("min_uplift_abs"),
            "optimization.min_uplift_abs",
            base.min_uplift_abs,
        ),
        min_uplift_rel=_as_float(
            optimization_data.get("min_uplift_rel"),
            "optimization.min_uplift_rel",
            base.min_uplift_rel,
        ),
        trace_staleness_days=_as_int(
            optimization_data.get("trace_staleness_days"),
            "optimization.trace_staleness_days",
            base.trace_staleness_days,
        ),
        task_overlap_threshold=_as_float(
            optimization_data.get("task_overlap_threshold"),
            "optimization.task_overlap_threshold",
            base.task_overlap_threshold,
        ),
    )

    return HarnessConfig(
        project=project,
        context=context,
        tools=tools,
        verification=verification,
        continuity=continuity,
        metrics=metrics,
        workflow=workflow,
        optimization=optimization,
    )


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path}: configuration must contain a mapping at the root")
    return loaded


def _merge_mapping(base: Dict[str, Any], overlay: Mapping[str, Any]) -> None:
    for key, value in overlay.items():
        existing = base.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            _merge_mapping(existing, value)
        elif isinstance(value, Mapping):
            nested: Dict[str, Any] = {}
            _merge_mapping(nested, value)
            base[key] = nested
        else:
            base[key] = value


def _section(data: Mapping[str, Any], key: str, prefix: str = "") -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{prefix}{key} must be a mapping")
    return value


def _as_str(value: Any, key: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ConfigError(f"{key} must be a string")
    return str(value)


def _as_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be a boolean")
    return value


def _as_int(value: Any, key: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer")
    return value


def _as_float(value: Any, key: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number")
    return float(value)


def _as_optional_float(value: Any, key: str) -> Optional[float]:
    if value is None:
        return None
    return _as_float(value, key, 0.0)


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list of strings")
    result: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{key} must be a list of strings")
        result.append(item)
    return result


def _as_str_mapping(value: Any, key: str) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a mapping of strings")
    result: Dict[str, str] = {}
    for alias, expansion in value.items():
        if not isinstance(expansion, str):
            raise ConfigError(f"{key}.{alias} must be a string")
        result[str(alias)] = expansion
    return result


def _as_sampling(value: Any) -> LogSampling:
    if value is None:
        return LogSampling.MILESTONES
    try:
        return LogSampling(str(value).lower())
    except ValueError as exc:
        options = ", ".join(mode.value for mode in LogSampling)
        raise ConfigError(f"continuity.log_sampling must be one of: {options}") from exc


__all__ = [
    "ConfigError",
    "ContextConfig",
    "ContinuityConfig",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_GLOBAL_CONFIG_FILE",
    "DEFAULT_LOCAL_FILE",
    "DEFAULT_WEIGHTS",
    "HarnessConfig",
    "LogSampling",
    "MetricsConfig",
    "OptimizationThresholds",
    "ProjectConfig",
    "ToolBaseline",
    "ToolDeprecated",
    "ToolsConfig",
    "VerificationConfig",
    "WorkflowConfig",
    "default_global_config_path",
    "load_config",
    "load_config_with_global",
    "parse_config",
]
