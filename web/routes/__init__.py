"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계정과목표, 계정/거래처 잔액
- journal: 분개 전기/초안/역분개/정정
- ledger: 계정별 원장
- reports: 시산표, 재무상태표, 손익계산서, 현금흐름표
- transactions: 업무 거래 (매출, 계산, 반품, 입금, 매입, 지급, 비용, 조정)
- transfers: 자금 이체
"""
