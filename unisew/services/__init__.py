"""서비스 패키지 — 워크플로 비즈니스 로직 계층.

Service package — Workflow logic layer.
Contains the per-session workflow controllers and the upload provider.
Services call repositories for backend operations and never hold
authoritative state: lists are re-fetched after every mutation.
"""
