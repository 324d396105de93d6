"""
Pydantic / datamodels used by the Arena Copilot runtime.

Split into:
- session_models: SessionState + SessionConfig + Turn
- result_models: ResumeAnalysis, VideoAnalysisResult and their schemas
- api_models: HTTP request/response schemas
"""
