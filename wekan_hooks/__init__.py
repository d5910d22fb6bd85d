"""Wekan hooks - keeps derived checklist and custom-field state in sync on board events."""

from .dispatcher import Dispatcher, DispatchReport, default_hooks
from .errors import ConfigurationError, HookError, NotFoundError, PathBuildError, StoreError
from .fields import build_path, normalize
from .hooks import HookContext, Outcome, RuleResult
from .models import Card, CustomFieldValues
from .resolver import FieldResolver, ResolvedFields
from .store import MongoStore, Store

__all__ = [
    "Card",
    "ConfigurationError",
    "CustomFieldValues",
    "DispatchReport",
    "Dispatcher",
    "FieldResolver",
    "HookContext",
    "HookError",
    "MongoStore",
    "NotFoundError",
    "Outcome",
    "PathBuildError",
    "ResolvedFields",
    "RuleResult",
    "Store",
    "StoreError",
    "build_path",
    "default_hooks",
    "normalize",
]
