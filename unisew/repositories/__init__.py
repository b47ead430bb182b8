"""레포지토리 패키지 — 백엔드 REST 호출 계층.

Repository package — Backend REST call layer.
Contains the repository classes that talk to the UniSew backend.
Each repository extends BaseRepository and returns typed Result values.
"""
