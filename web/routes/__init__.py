"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- books: 장부
- categories: 카테고리
- accounts: 계정
- transactions: 거래
- notes: 메모
- ledger: 계정 원장/잔액
- transfer: 장부 간 이체
- recycle_bin: 휴지통
- export: 데이터 내보내기
"""
