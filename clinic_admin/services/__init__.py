"""
Controller layer

Controllers sit between the presentation layer and the remote store: they
own request status, drafts, filtered views and reference selections, and
notify subscribers whenever any of them change.
"""

from clinic_admin.services.filters import (
    ALL,
    Facet,
    FilterCriteria,
    FilterSchema,
    apply_filter,
    build_predicate,
)
from clinic_admin.services.fields import FieldKind, FieldSpec
from clinic_admin.services.validation import (
    Check,
    MatchesPattern,
    MinLength,
    Positive,
    Required,
    RequiredWhen,
    SameAs,
    ValidationResult,
    validate,
)
from clinic_admin.services.assets import AssetUpload, read_asset
from clinic_admin.services.observable import BaseController, Observable
from clinic_admin.services.list_controller import EntityListController
from clinic_admin.services.form_controller import EntityFormController, FormPhase, FormSchema
from clinic_admin.services.references import ReferenceSet
from clinic_admin.services.session import SessionProvider, StaticSession

__all__ = [
    # Filters
    "ALL",
    "Facet",
    "FilterCriteria",
    "FilterSchema",
    "apply_filter",
    "build_predicate",
    # Fields and validation
    "FieldKind",
    "FieldSpec",
    "Check",
    "MatchesPattern",
    "MinLength",
    "Positive",
    "Required",
    "RequiredWhen",
    "SameAs",
    "ValidationResult",
    "validate",
    # Assets
    "AssetUpload",
    "read_asset",
    # Controllers
    "Observable",
    "BaseController",
    "EntityListController",
    "EntityFormController",
    "FormPhase",
    "FormSchema",
    "ReferenceSet",
    # Session
    "SessionProvider",
    "StaticSession",
]
