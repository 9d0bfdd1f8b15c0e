"""Request Budget - 실행 단위 원격 요청 예산 관리

예산 구조:
- ceiling: 한 번의 실행에서 보낼 수 있는 최대 요청 수 (일일 한도)
- safety_margin: ceiling 근처에서 단계를 미리 끝내기 위한 여유분
- issued: 지금까지 보낸 요청 수 (실패한 요청 포함, 감소하지 않음)
"""

from dataclasses import dataclass
from typing import Optional

from food_catalog.core.exceptions import BudgetExhaustedException


@dataclass
class BudgetConfig:
    """예산 설정"""

    ceiling: int = 4200  # 최대 요청 수
    safety_margin: int = 50  # 이만큼 남으면 모든 단계 종료

    def __post_init__(self):
        """설정 검증"""
        if self.ceiling <= 0:
            raise ValueError(f"ceiling must be positive (got {self.ceiling})")
        if not 0 <= self.safety_margin < self.ceiling:
            raise ValueError(
                f"safety_margin ({self.safety_margin}) must be in [0, ceiling={self.ceiling})"
            )


class RequestBudget:
    """원격 요청 예산

    오케스트레이터가 소유하고 서명 클라이언트에 주입합니다.
    issued는 단조 증가하며 ceiling을 넘지 않습니다.

    Usage:
        budget = RequestBudget(BudgetConfig(ceiling=4200, safety_margin=50))

        # 각 단계는 다음 요청 전에 확인
        if budget.exhausted:
            ...  # 단계 종료

        # 서명 클라이언트는 전송 직전에 소비
        budget.consume()
    """

    def __init__(self, config: Optional[BudgetConfig] = None):
        self.config = config or BudgetConfig()
        self._issued = 0

    @property
    def issued(self) -> int:
        return self._issued

    @property
    def ceiling(self) -> int:
        return self.config.ceiling

    @property
    def remaining(self) -> int:
        """ceiling까지 남은 요청 수"""
        return max(0, self.config.ceiling - self._issued)

    @property
    def exhausted(self) -> bool:
        """safety margin 도달 여부 (도달 시 모든 단계가 정상 종료해야 함)"""
        return self._issued >= self.config.ceiling - self.config.safety_margin

    def consume(self) -> int:
        """요청 1건 소비

        await 없이 확인과 증가를 한 번에 처리하므로 단일 이벤트 루프에서는
        원자적으로 동작합니다.

        Returns:
            int: 소비 후 issued 값

        Raises:
            BudgetExhaustedException: ceiling에 이미 도달한 경우
        """
        if self._issued >= self.config.ceiling:
            raise BudgetExhaustedException(self._issued, self.config.ceiling)
        self._issued += 1
        return self._issued

    def get_report(self) -> dict:
        """예산 사용 리포트"""
        return {
            "issued": self._issued,
            "ceiling": self.config.ceiling,
            "safety_margin": self.config.safety_margin,
            "remaining": self.remaining,
            "exhausted": self.exhausted,
        }

    def __repr__(self) -> str:
        return f"RequestBudget(issued={self._issued}/{self.config.ceiling}, margin={self.config.safety_margin})"
