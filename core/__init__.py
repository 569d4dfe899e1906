"""
LedgerBalance 코어 패키지

장부 도메인 로직, 설정, 로깅, 공통 유틸리티
"""
