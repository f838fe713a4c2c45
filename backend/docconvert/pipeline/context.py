"""
PipelineContext — mutable state object carried through every step.

The ConversionRequest it wraps is immutable: it is built once from the
trigger payload and never changed.  Steps read the request and the
working paths, and write what they produce (fetched file metadata,
output location) back onto the context for the steps after them.

ConversionOutcome is the single result produced per request.  It is
built by the orchestrator from the PipelineResult and only lives long
enough to shape an HTTP response or a callback payload.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from docconvert.core.constants import ObjectACL, TriggerSource
from docconvert.pipeline.errors import PipelineError, ValidationError
from docconvert.pipeline.paths import (
    WorkingPaths,
    file_name_from_key,
    file_name_from_url,
)


# ═══════════════════════════════════════════════════════════
#  ConversionRequest
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ConversionRequest:
    """
    One conversion job as described by its trigger.

    Args:
        source: TriggerSource.URL or TriggerSource.STORAGE.
        file_name: Base name of the source document.
        url: Source URL (URL flow only).
        bucket: Source bucket (storage flow) or destination bucket (URL flow).
        key: Source object key (storage flow only).
        acl: ACL applied to the converted object.
        callback_url: Optional endpoint notified of the outcome.
    """

    source: TriggerSource
    file_name: str
    bucket: str
    acl: ObjectACL
    url: str | None = None
    key: str | None = None
    callback_url: str | None = None

    @property
    def source_ref(self) -> str:
        """Human-readable locator of the source, as reported in callbacks."""
        if self.source == TriggerSource.URL:
            return self.url or ""
        return f"{self.bucket}/{self.key}"

    @classmethod
    def from_url_payload(cls, payload: Any, *, bucket: str) -> ConversionRequest:
        """
        Build a URL-flow request from the decoded HTTP body.

        Raises ValidationError when `url` is missing, empty, or has no
        file name in its final path segment.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Payload must be a JSON object")

        url = payload.get("url")
        if not isinstance(url, str) or not url.strip():
            raise ValidationError("Field 'url' is required", details={"field": "url"})

        url = url.strip()
        file_name = file_name_from_url(url)
        if not file_name:
            raise ValidationError(
                "Could not derive a file name from 'url'",
                details={"field": "url", "url": url},
            )

        return cls(
            source=TriggerSource.URL,
            file_name=file_name,
            bucket=bucket,
            acl=ObjectACL.PUBLIC_READ,
            url=url,
        )

    @classmethod
    def from_queue_message(cls, message: str | bytes | dict[str, Any]) -> ConversionRequest:
        """
        Build a storage-flow request from a queue message body.

        Accepts the raw JSON body or an already-decoded dict.
        `acl` defaults to private; `callback_url` is optional.
        """
        if isinstance(message, (str, bytes)):
            try:
                message = json.loads(message)
            except ValueError as exc:
                raise ValidationError(f"Message body is not valid JSON: {exc}") from exc

        if not isinstance(message, dict):
            raise ValidationError("Message body must be a JSON object")

        bucket = message.get("bucket")
        key = message.get("key")
        if not isinstance(bucket, str) or not bucket:
            raise ValidationError("Field 'bucket' is required", details={"field": "bucket"})
        if not isinstance(key, str) or not key:
            raise ValidationError("Field 'key' is required", details={"field": "key"})

        file_name = file_name_from_key(key)
        if not file_name:
            raise ValidationError(
                "Could not derive a file name from 'key'",
                details={"field": "key", "key": key},
            )

        raw_acl = message.get("acl") or ObjectACL.PRIVATE
        try:
            acl = ObjectACL(raw_acl)
        except ValueError:
            raise ValidationError(
                f"Unsupported acl '{raw_acl}'",
                details={"field": "acl", "allowed": [a.value for a in ObjectACL]},
            ) from None

        callback_url = message.get("callback_url") or None
        if callback_url is not None and not isinstance(callback_url, str):
            raise ValidationError("Field 'callback_url' must be a string")

        return cls(
            source=TriggerSource.STORAGE,
            file_name=file_name,
            bucket=bucket,
            key=key,
            acl=acl,
            callback_url=callback_url,
        )


# ═══════════════════════════════════════════════════════════
#  StepResult
# ═══════════════════════════════════════════════════════════

@dataclass
class StepResult:
    """Outcome of a single pipeline step execution."""

    step_name: str
    status: str                     # StepStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_name": self.step_name,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "metadata": self.metadata,
        }


# ═══════════════════════════════════════════════════════════
#  PipelineContext
# ═══════════════════════════════════════════════════════════

@dataclass
class PipelineContext:
    """
    Carries all state between pipeline steps.

    Populated progressively — the fetch/download step records what it
    materialised, the upload step records where the PDF went.
    """

    # ─── Identity (set at init) ────────────────────────
    request: ConversionRequest
    paths: WorkingPaths
    output_key: str
    execution_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # ─── Populated by steps ────────────────────────────
    source_mime: str | None = None
    source_size_bytes: int | None = None
    output_size_bytes: int | None = None
    output_url: str | None = None

    # ─── Execution tracking ────────────────────────────
    current_step_index: int = 0
    total_steps: int = 0
    step_results: list[StepResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def converted_ref(self) -> str:
        return f"{self.request.bucket}/{self.output_key}"

    def add_error(self, error: str) -> None:
        """Record a step failure message."""
        self.errors.append(error)

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging."""
        return {
            "execution_id": self.execution_id,
            "source": self.request.source,
            "source_ref": self.request.source_ref,
            "file_name": self.request.file_name,
            "output_key": self.output_key,
            "source_mime": self.source_mime,
            "source_size_bytes": self.source_size_bytes,
            "output_size_bytes": self.output_size_bytes,
            "steps_completed": len(self.step_results),
            "total_steps": self.total_steps,
            "errors": self.errors,
        }


# ═══════════════════════════════════════════════════════════
#  ConversionOutcome
# ═══════════════════════════════════════════════════════════

@dataclass
class ConversionOutcome:
    """Success or failure (with cause) of one ConversionRequest."""

    success: bool
    source_ref: str
    execution_id: str | None = None
    converted_ref: str | None = None
    output_url: str | None = None
    error: PipelineError | None = None
    failed_step: str | None = None
    duration_ms: int = 0
    steps: list[dict[str, Any]] = field(default_factory=list)

    def to_notification(self) -> dict[str, Any]:
        """Callback payload; `converted_file` is only present on success."""
        payload: dict[str, Any] = {"source_file": self.source_ref}
        if self.success:
            payload["converted_file"] = self.converted_ref
        payload["success"] = self.success
        return payload

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "execution_id": self.execution_id,
            "source_file": self.source_ref,
            "converted_file": self.converted_ref,
            "output_url": self.output_url,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "failed_step": self.failed_step,
            "duration_ms": self.duration_ms,
            "steps": self.steps,
        }
