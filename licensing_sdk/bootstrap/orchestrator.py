"""
Bootstrap orchestrator - the licensing state machine.

A run moves through the states in order:

    CREDENTIAL_RESOLUTION -> CACHE_CHECK -> DOMAIN_VALIDATION
    -> PAYMENT_AND_LICENSE_CHECK -> INJECTABLE_RETRIEVAL
    -> INJECTABLE_PROCESSING -> READY_DISPATCH -> COMPLETED

Any fatal error jumps to FAILURE, where the configured invalid-behavior is
dispatched. A cache hit skips straight from CACHE_CHECK to the usability
decision. Per-injectable errors are never fatal.
"""

import uuid
from typing import Any, Callable, List, Optional

from ..cache.validation_cache import ValidationCache
from ..client.remote_service_client import RemoteServiceClient
from ..config import SDKConfig
from ..constants import BootstrapState, FailureReason
from ..context.operation_context import OperationHandler
from ..enforcement.invalid_behavior import InvalidBehaviorDispatcher, InvalidViewRenderer
from ..exceptions import (
    BaseError,
    MaterializationError,
    MissingCredentialError,
    RemoteServiceError,
    clear_correlation_id,
)
from ..processors.processing_result import InjectableOutcome
from ..processors.processor_factory import create_processor
from ..processors.processor_interface import InjectableProcessorInterface
from ..schemas.credential_schema import Credential
from ..schemas.injectable_schema import Injectable
from ..schemas.verdict_schema import ValidationVerdict
from ..utils.logger import get_logger
from .bootstrap_result import BootstrapResult


class BootstrapFailure(Exception):
    """Internal signal that the run must stop in the FAILURE state."""

    def __init__(self, reason: FailureReason, error: Optional[BaseError] = None):
        super().__init__(reason.value)
        self.reason = reason
        self.error = error


class BootstrapOrchestrator:
    """
    Runs license validation, payment enforcement and injectable processing.

    The processor is resolved once, at construction, and used for every
    injectable of every run.
    """

    def __init__(
        self,
        config: SDKConfig,
        client: Optional[Any] = None,
        cache: Optional[ValidationCache] = None,
        processor: Optional[Any] = None,
        renderer: Optional[InvalidViewRenderer] = None,
        redirector: Optional[Callable[[str], Any]] = None,
    ):
        """
        Args:
            config: SDK configuration
            client: Remote service client; defaults to the HTTP client
            cache: Validation cache; defaults to one at ``config.cache_path``
            processor: Processor selector overriding ``config.injectables_processor``
            renderer: Modal renderer for the invalid-behavior dispatcher
            redirector: Redirect handler for the invalid-behavior dispatcher
        """
        self.config = config
        self.client = client if client is not None else RemoteServiceClient(config)
        self.cache = cache if cache is not None else ValidationCache(config.cache_path)
        self.processor: InjectableProcessorInterface = create_processor(
            processor if processor is not None else config.injectables_processor
        )
        self.dispatcher = InvalidBehaviorDispatcher(config, renderer=renderer, redirector=redirector)
        self.operations = OperationHandler()
        self.logger = get_logger(config.logging.level)

    def run(self) -> BootstrapResult:
        """
        Execute one bootstrap run.

        Returns:
            BootstrapResult; ``halted`` is set when the host should stop

        Raises:
            Exception: Whatever the ``on_ready`` callback raises
        """
        correlation_id = str(uuid.uuid4())
        result = BootstrapResult(correlation_id=correlation_id)

        try:
            with self.operations.operation(
                "bootstrap", correlation_id=correlation_id, action=self.config.action
            ) as op:
                try:
                    self._execute(result)
                except BootstrapFailure as failure:
                    self._fail(result, failure.reason, failure.error)
                    return result

                self._dispatch_ready(result)
                result.enter(BootstrapState.COMPLETED)
                op.add_metric("materialized", len(result.materialized))
                op.add_metric("injectable_errors", len(result.injectable_errors))
                self.logger.info(
                    "Bootstrap completed",
                    extra={
                        "from_cache": result.from_cache,
                        "materialized": len(result.materialized),
                        "failed": len(result.injectable_errors),
                    },
                )
                return result
        finally:
            clear_correlation_id()

    def _execute(self, result: BootstrapResult) -> None:
        credential = self._resolve_credential(result)

        verdict = self._check_cache(credential, result)
        if verdict is None:
            verdict = self._check_remote(credential, result)

        result.verdict = verdict
        result.raw_response = verdict.raw_response
        if not verdict.is_valid:
            raise BootstrapFailure(FailureReason.LICENSE_INVALID)
        if not verdict.is_paid:
            raise BootstrapFailure(FailureReason.PAYMENT_REQUIRED)
        result.success = True

        if self.config.injectables:
            result.injectables = self._retrieve_injectables(credential, result)

        if self.config.handle_injectables and result.injectables:
            self._process_injectables(result)

    def _resolve_credential(self, result: BootstrapResult) -> Credential:
        result.enter(BootstrapState.CREDENTIAL_RESOLUTION)
        credential = Credential.resolve(self.config.license, self.config.api_key)
        if credential is None:
            raise BootstrapFailure(FailureReason.MISSING_CREDENTIAL, MissingCredentialError())
        self.logger.debug("Credential resolved", extra={"credential": str(credential)})
        return credential

    def _check_cache(
        self, credential: Credential, result: BootstrapResult
    ) -> Optional[ValidationVerdict]:
        if self.config.recheck:
            return None

        result.enter(BootstrapState.CACHE_CHECK)
        fingerprint = self.cache.fingerprint(credential.value, self.config.action)
        verdict = self.cache.get(fingerprint)
        if verdict is not None:
            result.from_cache = True
            self.logger.info(
                "Using cached validation verdict",
                extra={"is_valid": verdict.is_valid, "is_paid": verdict.is_paid},
            )
        return verdict

    def _check_remote(self, credential: Credential, result: BootstrapResult) -> ValidationVerdict:
        result.enter(BootstrapState.DOMAIN_VALIDATION)
        try:
            check = self.client.check_license(
                credential, self.config.action, domain=self.config.domain
            )
        except RemoteServiceError as e:
            raise BootstrapFailure(FailureReason.API_ERROR, e)

        if check.domain_allowed is False:
            self.logger.warning(
                "Domain rejected by licensing service", extra={"domain": self.config.domain}
            )
            raise BootstrapFailure(FailureReason.DOMAIN_NOT_ALLOWED)

        result.enter(BootstrapState.PAYMENT_AND_LICENSE_CHECK)
        fingerprint = self.cache.fingerprint(credential.value, self.config.action)
        verdict = ValidationVerdict.from_check(check, fingerprint)
        self.cache.put(fingerprint, verdict)
        return verdict

    def _retrieve_injectables(
        self, credential: Credential, result: BootstrapResult
    ) -> List[Injectable]:
        result.enter(BootstrapState.INJECTABLE_RETRIEVAL)
        try:
            return self.client.list_injectables(credential)
        except RemoteServiceError as e:
            result.retrieval_error = e
            if self.config.injectables_required:
                raise BootstrapFailure(FailureReason.INJECTABLES_UNAVAILABLE, e)
            self.logger.warning(
                "Injectables unavailable, continuing without them",
                extra={"error_code": e.error_code.value, "error_details": e.message},
            )
            return []

    def _process_injectables(self, result: BootstrapResult) -> None:
        result.enter(BootstrapState.INJECTABLE_PROCESSING)
        processor_name = self.processor.get_processor_info().get("name")

        for injectable in result.injectables:
            try:
                location = self.processor.handle(
                    injectable,
                    self.config.secret,
                    self.config.injectables_path,
                    self.config.injectables_verify,
                )
            except BaseError as e:
                e.add_context(slug=injectable.slug)
                self._record_injectable_failure(result, injectable, e, processor_name)
            except Exception as e:
                # Custom processors may raise anything; wrap so the run can carry on
                error = MaterializationError(
                    f"Injectable processor failed: {e}",
                    slug=injectable.slug,
                    cause=e,
                    phase="processor",
                )
                self._record_injectable_failure(result, injectable, error, processor_name)
            else:
                result.outcomes.append(
                    InjectableOutcome.success_result(
                        injectable.slug, injectable.mode, location, processor=processor_name
                    )
                )

    def _record_injectable_failure(
        self,
        result: BootstrapResult,
        injectable: Injectable,
        error: BaseError,
        processor_name: Optional[str],
    ) -> None:
        result.injectable_errors.append(error)
        result.outcomes.append(
            InjectableOutcome.failure_result(
                injectable.slug, injectable.mode, error, processor=processor_name
            )
        )
        self.logger.warning(
            "Injectable skipped",
            extra={
                "slug": injectable.slug,
                "phase": error.context.get("phase"),
                "error_code": error.error_code.value,
            },
        )

    def _dispatch_ready(self, result: BootstrapResult) -> None:
        result.enter(BootstrapState.READY_DISPATCH)
        if self.config.on_ready is not None:
            self.config.on_ready(result.raw_response)

    def _fail(
        self, result: BootstrapResult, reason: FailureReason, error: Optional[BaseError]
    ) -> None:
        result.enter(BootstrapState.FAILURE)
        result.success = False
        result.halted = True
        result.failure_reason = reason
        result.error = error
        result.enforcement = self.dispatcher.dispatch(
            reason, detail=error.message if error is not None else None
        )
        self.logger.warning(
            "Bootstrap halted",
            extra={"reason": reason.value, "behavior": self.config.invalid_behavior.value},
        )


def bootstrap(
    config: Optional[SDKConfig] = None,
    client: Optional[Any] = None,
    cache: Optional[ValidationCache] = None,
    **options: Any,
) -> BootstrapResult:
    """
    Build an orchestrator and run it once.

    Args:
        config: SDK configuration; built from ``options`` and the environment
            when omitted
        client: Optional remote service client
        cache: Optional validation cache
        **options: SDKConfig fields, used only when ``config`` is None

    Returns:
        BootstrapResult of the run
    """
    if config is None:
        config = SDKConfig.from_env(**options)
    return BootstrapOrchestrator(config, client=client, cache=cache).run()
