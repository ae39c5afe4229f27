"""
타입 정의 모듈

애플리케이션 전역에서 쓰는 Enum 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class BooksMode(str, Enum):
    """장부 모드 (실장부 / 샌드박스)

    모드에 따라 사용하는 DB 파일이 다름.
    """

    PRODUCTION = "production"
    SANDBOX = "sandbox"


class PartyKind(str, Enum):
    """거래 상대방 유형 (매출채권/매입채무 보조원장용)"""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"
