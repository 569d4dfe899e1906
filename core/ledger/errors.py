"""
Ledger 도메인 예외

모든 도메인 연산은 쓰기 전에 검증하고 아래 예외 중 하나로 즉시 실패한다.
Web 계층은 kind 값으로 응답 상태를 결정한다.
"""


class LedgerError(Exception):
    """Ledger 도메인 예외 기본 클래스"""

    kind = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """잘못된 입력 (빈 이름, 불균형 분개, 0 이하 금액, 동일 장부 이체 등)"""

    kind = "validation_error"


class ConflictError(LedgerError):
    """장부 내 이름 중복"""

    kind = "conflict_error"


class NotFoundError(LedgerError):
    """해당 장부에 엔티티 없음"""

    kind = "not_found_error"


class InvariantError(LedgerError):
    """도메인 규칙 위반 (사용 중인 카테고리 삭제, 거래가 있는 계정 삭제)"""

    kind = "invariant_error"


class ProtectedEntityError(LedgerError):
    """시스템 생성 엔티티 또는 기본 장부 변경/삭제 시도"""

    kind = "protected_entity_error"
