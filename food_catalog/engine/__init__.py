"""Engine Layer - Discovery / Extraction / Run orchestration

This package provides the core engine layer for the crawler:
- RequestBudget: Run-scoped remote request budget
- DiscoveryEngine: Seed-term breadth-first discovery (engine.discovery)
- ExtractionEngine: Per-entity exhaustive pagination (engine.extraction)
- RunOrchestrator: Run state machine (engine.orchestrator)

budget/result만 여기서 export합니다. 크롤러 클라이언트가 budget을 import하므로
orchestrator 등은 하위 모듈에서 직접 import해야 순환 import가 생기지 않습니다.
"""

from .budget import BudgetConfig, RequestBudget
from .result import ExtractionOutcome, ExtractionStatus, RunReport, RunState

__all__ = [
    "BudgetConfig",
    "RequestBudget",
    "ExtractionOutcome",
    "ExtractionStatus",
    "RunReport",
    "RunState",
]
