"""
Code generation gateway package.

Provides:
- Model registry mapping model ids to hosted inference endpoints
- Async dispatcher with a per-request timeout and error taxonomy
- FastAPI service exposing POST /generate-code
"""
