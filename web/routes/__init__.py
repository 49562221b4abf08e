"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- external_vault: 외부 금고 거래/재고 API
- logs: 감사 로그 조회
- realtime: 실시간 이벤트 WebSocket
"""
