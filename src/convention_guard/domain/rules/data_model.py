"""Data-model rules: shared model base, modern validators and config markers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convention_guard.domain.catalog import SCOPE_FILE
from convention_guard.domain.entities import Finding

if TYPE_CHECKING:
    from convention_guard.domain.catalog import RuleDefinition
    from convention_guard.domain.config import MatcherSettings
    from convention_guard.domain.entities import FileFacts, ProjectTree, SourceFile


class ModelBaseTypeRule:
    """
    Models must derive from the project's shared base schema.

    A class deriving directly from a raw model base (BaseModel) is flagged,
    unless it is itself one of the expected bases (the BaseSchema definition).
    """

    check: str = "model-base-type"
    scope: str = SCOPE_FILE
    requires_syntax: bool = True

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        if source_file is None or facts is None or not settings.expected_model_bases:
            return []
        raw_bases = set(settings.model_bases)
        expected = " or ".join(settings.expected_model_bases)
        findings: list[Finding] = []
        for model in facts.models:
            if model.name in settings.expected_model_bases:
                continue
            direct = sorted(raw_bases.intersection(model.bases))
            if not direct:
                continue
            findings.append(
                Finding.from_rule(
                    rule,
                    path=source_file.path,
                    line=model.line,
                    message=f"Model '{model.name}' derives from {', '.join(direct)}; derive from {expected}",
                )
            )
        return findings


class DeprecatedValidatorRule:
    """Validator decorators from the legacy API."""

    check: str = "deprecated-validator"
    scope: str = SCOPE_FILE
    requires_syntax: bool = True

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        if source_file is None or facts is None:
            return []
        deprecated = set(settings.deprecated_validators)
        modern = " or ".join(f"@{name}" for name in settings.modern_validators)
        return [
            Finding.from_rule(
                rule,
                path=source_file.path,
                line=use.line,
                message=f"'{model.name}.{use.method}' uses deprecated @{use.name}; use {modern}",
            )
            for model in facts.models
            for use in model.validators
            if use.name in deprecated
        ]


class LegacyModelConfigRule:
    """Inner `class Config` instead of the `model_config` marker."""

    check: str = "legacy-model-config"
    scope: str = SCOPE_FILE
    requires_syntax: bool = True

    def evaluate(
        self,
        tree: ProjectTree,
        source_file: SourceFile | None,
        facts: FileFacts | None,
        rule: RuleDefinition,
        settings: MatcherSettings,
    ) -> list[Finding]:
        if source_file is None or facts is None:
            return []
        legacy = set(settings.deprecated_config_markers)
        preferred = " or ".join(settings.config_markers) or "the current config marker"
        findings: list[Finding] = []
        for model in facts.models:
            for marker in model.config_markers:
                if marker in legacy:
                    findings.append(
                        Finding.from_rule(
                            rule,
                            path=source_file.path,
                            line=model.line,
                            message=f"Model '{model.name}' uses legacy '{marker}'; use {preferred}",
                        )
                    )
        return findings
