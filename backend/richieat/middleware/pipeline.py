"""
RICHIEAT Backend — Request Pipeline
=====================================

What:  The middleware chain as a declared, ordered list of stages.
Why:   Starlette executes middleware in REVERSE order of `add_middleware`
       calls. Writing the registrations by hand makes the real order easy
       to get wrong; here the order is data, checked when the pipeline is
       built and translated into registrations in one place.

Stage order (request direction):
    Request → [Request ID] → [Access Log] → [Security Log] → [CORS]
            → [Body Limit] → Route Handler

    The response travels back through the same stages in reverse, so the
    request ID header is present when the loggers read the response.

A pipeline may omit stages (tests build partial ones), but the stages it
has must appear in this order and at most once.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Sequence, Tuple

from fastapi import FastAPI

from richieat.config import MAX_BODY_SIZE_BYTES, Settings
from richieat.middleware.body_limit import BodySizeLimitMiddleware
from richieat.middleware.cors import CORSPolicyMiddleware
from richieat.middleware.logging import RequestLoggingMiddleware
from richieat.middleware.request_id import RequestIDMiddleware
from richieat.middleware.security import SecurityLoggingMiddleware


class Stage(IntEnum):
    REQUEST_ID = 1
    ACCESS_LOG = 2
    SECURITY_LOG = 3
    CORS = 4
    BODY_LIMIT = 5


class PipelineOrderError(ValueError):
    """Raised when stages are declared out of order or more than once."""


@dataclass(frozen=True)
class PipelineStage:
    stage: Stage
    middleware: type
    options: Dict[str, Any] = field(default_factory=dict)


class RequestPipeline:
    def __init__(self, stages: Sequence[PipelineStage]):
        self._check_order(stages)
        self.stages: Tuple[PipelineStage, ...] = tuple(stages)

    @staticmethod
    def _check_order(stages: Sequence[PipelineStage]) -> None:
        previous = None
        for entry in stages:
            if previous is not None and entry.stage <= previous:
                raise PipelineOrderError(
                    f"Stage {entry.stage.name} cannot follow {previous.name}"
                )
            previous = entry.stage

    @property
    def order(self) -> Tuple[Stage, ...]:
        return tuple(entry.stage for entry in self.stages)

    def install(self, app: FastAPI) -> None:
        """Register the stages so they execute in declared order."""
        for entry in reversed(self.stages):
            app.add_middleware(entry.middleware, **entry.options)


def default_pipeline(app_settings: Settings) -> RequestPipeline:
    return RequestPipeline(
        [
            PipelineStage(Stage.REQUEST_ID, RequestIDMiddleware),
            PipelineStage(Stage.ACCESS_LOG, RequestLoggingMiddleware),
            PipelineStage(
                Stage.SECURITY_LOG,
                SecurityLoggingMiddleware,
                {
                    "failure_threshold": app_settings.security_auth_failure_threshold,
                    "failure_window": app_settings.security_auth_failure_window,
                },
            ),
            PipelineStage(
                Stage.CORS,
                CORSPolicyMiddleware,
                {"allow_origins": app_settings.cors_origins_list},
            ),
            PipelineStage(
                Stage.BODY_LIMIT,
                BodySizeLimitMiddleware,
                {"max_body_size": MAX_BODY_SIZE_BYTES},
            ),
        ]
    )
