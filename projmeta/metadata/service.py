"""
Metadata Service Module

Orchestrates every metadata operation exposed over HTTP: load the project
record, authorize the principal, validate the payload, merge it into the
stored document, persist, and shape the response. Route handlers stay thin
and only translate HTTP to calls on MetadataService.

The service keeps no state between calls besides its repository handle.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

import structlog

from projmeta.core.config import settings
from projmeta.core.errors import FieldError, MetadataValidationError, NotFoundError
from projmeta.db.repository import ProjectRecord, ProjectRepository
from projmeta.metadata import merge, permissions, templates, validator
from projmeta.metadata.milestones import milestone_stats
from projmeta.metadata.permissions import EditScope, Principal
from projmeta.metadata.validator import PayloadKind
from projmeta.schemas.metadata import (
    Currency,
    CustomFieldType,
    NotificationLevel,
    TemplateType,
    enum_values,
)
from projmeta.schemas.project import ProjectCreate

logger = structlog.get_logger(__name__)


def _schema_info() -> Dict[str, List[str]]:
    return {
        "templates": enum_values(TemplateType),
        "currencies": enum_values(Currency),
        "customFieldTypes": enum_values(CustomFieldType),
        "notificationLevels": enum_values(NotificationLevel),
    }


def _sorted_fields(fields: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(fields, key=lambda f: f.get("order") or 0)


def _unwrap(payload: Any, key: str) -> Any:
    # Sub-resource bodies may arrive as {"<key>": [...]} or as the bare list
    if isinstance(payload, Mapping) and key in payload:
        return payload[key]
    return payload


def _describe(errors: List[FieldError], prefix: str) -> List[str]:
    described = []
    for error in errors:
        if error.field == prefix.rstrip("."):
            path = ""
        elif error.field.startswith(prefix):
            path = error.field[len(prefix):]
        else:
            path = error.field
        described.append(f"{path}: {error.message}" if path else error.message)
    return described


class MetadataService:
    def __init__(self, repository: ProjectRepository):
        self.repository = repository
        self.logger = logger.bind(component="metadata_service")

    # ------------------------------------------------------------------
    # Loading and authorization
    # ------------------------------------------------------------------

    def _load(self, project_id: int) -> ProjectRecord:
        record = self.repository.get(project_id)
        if record is None:
            raise NotFoundError("Project not found or access denied")
        return record

    def _readable(self, principal: Principal, project_id: int) -> ProjectRecord:
        record = self._load(project_id)
        permissions.require_read(principal, record.access)
        return record

    def _editable(
        self,
        principal: Principal,
        project_id: int,
        what: str,
        scope: EditScope = EditScope.METADATA,
    ) -> ProjectRecord:
        record = self._load(project_id)
        permissions.require_edit(principal, record.access, scope=scope, what=what)
        return record

    def _persist(self, record: ProjectRecord, document: Dict[str, Any], action: str, keys) -> ProjectRecord:
        saved = self.repository.save_metadata(record.id, document)
        self.logger.info(
            "Project metadata updated",
            project_id=record.id,
            action=action,
            keys=sorted(keys),
            actor=document.get("lastModifiedBy"),
        )
        return saved

    # ------------------------------------------------------------------
    # Whole-document operations
    # ------------------------------------------------------------------

    def get_metadata(self, principal: Principal, project_id: int) -> Dict[str, Any]:
        record = self._readable(principal, project_id)
        return {
            "projectId": record.id,
            "projectName": record.name,
            "metadata": record.metadata,
            "schema": _schema_info(),
            "permissions": {
                "canEdit": permissions.can_edit(principal, record.access),
                "canEditFieldValues": permissions.can_edit(
                    principal, record.access, EditScope.FIELD_VALUES
                ),
            },
        }

    def patch_metadata(self, principal: Principal, project_id: int, payload: Any) -> Dict[str, Any]:
        record = self._editable(principal, project_id, what="project metadata")
        partial = validator.to_document(
            validator.validate(payload, PayloadKind.FULL_METADATA), partial=True
        )
        document = merge.patch(record.metadata, partial, principal.id)
        saved = self._persist(record, document, "patch", partial.keys())
        return {
            "projectId": saved.id,
            "projectName": saved.name,
            "metadata": saved.metadata,
            "message": "Project metadata updated successfully",
        }

    def replace_metadata(self, principal: Principal, project_id: int, payload: Any) -> Dict[str, Any]:
        record = self._editable(principal, project_id, what="project metadata")
        full = validator.to_document(validator.validate(payload, PayloadKind.FULL_METADATA))
        document = merge.replace(record.metadata, full, principal.id)
        saved = self._persist(record, document, "replace", full.keys())
        return {
            "projectId": saved.id,
            "projectName": saved.name,
            "metadata": saved.metadata,
            "message": "Project metadata replaced successfully",
        }

    def validate_metadata(self, principal: Principal, project_id: int, payload: Any) -> Dict[str, Any]:
        """
        Dry-run validation of any combination of metadata, milestones,
        customFields and budget. Nothing is persisted.
        """
        record = self._readable(principal, project_id)
        request = self._check_validation_request(payload)

        errors: List[str] = []
        warnings: List[str] = []
        field_validation: Dict[str, Dict[str, Any]] = {}

        if request.get("metadata") is not None:
            try:
                validator.validate(request["metadata"], PayloadKind.FULL_METADATA)
            except MetadataValidationError as exc:
                errors.extend(_describe(exc.errors, ""))

        milestones = request.get("milestones")
        if milestones is not None:
            for index, milestone in enumerate(milestones):
                item_errors = self._item_errors([milestone], PayloadKind.MILESTONES, "milestones.0.")
                field_validation[f"milestone_{index}"] = {"isValid": not item_errors, "errors": item_errors}
                errors.extend(f"Milestone {index + 1}: {e}" for e in item_errors)
            if len(milestones) > settings.MILESTONE_WARNING_THRESHOLD:
                warnings.append("Large number of milestones may impact performance")

        custom_fields = request.get("customFields")
        if custom_fields is not None:
            for index, custom_field in enumerate(custom_fields):
                item_errors = self._item_errors([custom_field], PayloadKind.CUSTOM_FIELDS, "customFields.0.")
                field_validation[f"customField_{index}"] = {"isValid": not item_errors, "errors": item_errors}
                errors.extend(f"Custom field {index + 1}: {e}" for e in item_errors)
            if len(custom_fields) > settings.CUSTOM_FIELD_WARNING_THRESHOLD:
                warnings.append("Large number of custom fields may affect user experience")

        if request.get("budget") is not None:
            budget_errors = self._item_errors(
                {"budget": request["budget"]}, PayloadKind.FULL_METADATA, "budget."
            )
            field_validation["budget"] = {"isValid": not budget_errors, "errors": budget_errors}
            errors.extend(f"Budget: {e}" for e in budget_errors)

        self.logger.info(
            "Metadata validation completed",
            project_id=record.id,
            is_valid=not errors,
            error_count=len(errors),
            warning_count=len(warnings),
        )
        return {
            "projectId": record.id,
            "projectName": record.name,
            "validation": {
                "isValid": not errors,
                "errors": errors,
                "warnings": warnings,
                "fieldValidation": field_validation,
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def _check_validation_request(payload: Any) -> Mapping[str, Any]:
        if not isinstance(payload, Mapping):
            raise MetadataValidationError([
                FieldError(field="payload", message="Validation request must be an object")
            ])
        expected = {"metadata": Mapping, "milestones": list, "customFields": list, "budget": Mapping}
        problems = [
            FieldError(field=key, message=f"'{key}' has the wrong type")
            for key, kind in expected.items()
            if payload.get(key) is not None and not isinstance(payload[key], kind)
        ]
        if problems:
            raise MetadataValidationError(problems)
        return payload

    @staticmethod
    def _item_errors(payload: Any, kind: PayloadKind, prefix: str) -> List[str]:
        try:
            validator.validate(payload, kind)
        except MetadataValidationError as exc:
            return _describe(exc.errors, prefix)
        return []

    # ------------------------------------------------------------------
    # Milestones
    # ------------------------------------------------------------------

    def get_milestones(self, principal: Principal, project_id: int) -> Dict[str, Any]:
        record = self._readable(principal, project_id)
        milestones = record.metadata.get("milestones") or []
        return {
            "projectId": record.id,
            "projectName": record.name,
            "milestones": milestones,
            "stats": milestone_stats(milestones),
        }

    def replace_milestones(self, principal: Principal, project_id: int, payload: Any) -> Dict[str, Any]:
        record = self._editable(principal, project_id, what="project milestones")
        milestones = validator.to_documents(
            validator.validate(_unwrap(payload, "milestones"), PayloadKind.MILESTONES)
        )
        document = merge.patch(record.metadata, {"milestones": milestones}, principal.id)
        saved = self._persist(record, document, "replace_milestones", ["milestones"])
        stored = saved.metadata.get("milestones") or []
        return {
            "projectId": saved.id,
            "projectName": saved.name,
            "milestones": stored,
            "stats": milestone_stats(stored),
            "message": "Project milestones updated successfully",
        }

    # ------------------------------------------------------------------
    # Custom fields
    # ------------------------------------------------------------------

    def get_custom_fields(self, principal: Principal, project_id: int) -> Dict[str, Any]:
        record = self._readable(principal, project_id)
        return {
            "projectId": record.id,
            "projectName": record.name,
            "customFields": _sorted_fields(record.metadata.get("customFields") or []),
            "availableTypes": enum_values(CustomFieldType),
        }

    def replace_custom_fields(self, principal: Principal, project_id: int, payload: Any) -> Dict[str, Any]:
        record = self._editable(principal, project_id, what="custom fields")
        fields = validator.to_documents(
            validator.validate(_unwrap(payload, "customFields"), PayloadKind.CUSTOM_FIELDS)
        )
        document = merge.patch(record.metadata, {"customFields": fields}, principal.id)
        saved = self._persist(record, document, "replace_custom_fields", ["customFields"])
        return {
            "projectId": saved.id,
            "projectName": saved.name,
            "customFields": _sorted_fields(saved.metadata.get("customFields") or []),
            "message": "Custom fields updated successfully",
        }

    def patch_field_values(self, principal: Principal, project_id: int, payload: Any) -> Dict[str, Any]:
        field_values = payload.get("fieldValues") if isinstance(payload, Mapping) else None
        if not isinstance(field_values, Mapping):
            raise MetadataValidationError([
                FieldError(field="fieldValues", message="Field values must be provided as an object")
            ])

        record = self._editable(
            principal, project_id, what="field values", scope=EditScope.FIELD_VALUES
        )
        values = validator.validate(
            field_values,
            PayloadKind.FIELD_VALUES,
            existing_fields=record.metadata.get("customFields") or [],
        )
        document = merge.patch_field_values(record.metadata, values, principal.id)
        saved = self._persist(record, document, "patch_field_values", ["customFields"])
        return {
            "projectId": saved.id,
            "projectName": saved.name,
            "customFields": _sorted_fields(saved.metadata.get("customFields") or []),
            "message": "Custom field values updated successfully",
        }

    # ------------------------------------------------------------------
    # Project creation
    # ------------------------------------------------------------------

    def create_project(self, principal: Principal, project_in: ProjectCreate) -> Dict[str, Any]:
        """
        Create a project owned by the principal.

        With a template, the template's default metadata goes through the
        same validate + replace path as a PUT; without one the metadata
        starts empty.
        """
        document: Dict[str, Any] = {}
        if project_in.template is not None:
            template = templates.get_template(project_in.template.value)
            seeded = validator.validate(template.defaultMetadata, PayloadKind.FULL_METADATA)
            document = merge.replace({}, validator.to_document(seeded), principal.id)

        record = self.repository.create(
            name=project_in.name,
            owner_id=principal.id,
            metadata=document,
            description=project_in.description,
        )
        self.logger.info(
            "Project created",
            project_id=record.id,
            owner_id=principal.id,
            template=project_in.template.value if project_in.template else None,
        )
        return {
            "projectId": record.id,
            "projectName": record.name,
            "metadata": record.metadata,
        }
