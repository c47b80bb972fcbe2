# Stateful orchestration: result cache, calculation workflow, service
from .result_cache import ResultCache, CacheEntry, CacheMetrics, fingerprint, canonical_params
from .workflow import (
    CalculationWorkflow, WorkflowEvent, WorkflowContext, EventRecord, next_state,
    IdleState, LoadingState, CalculatingState, CompleteState, ErrorState,
)
from .service import CalculationService
