# worker/app/dependencies/analyzer.py
from fastapi import Request

from worker.app.errors import AnalyzeError
from worker.app.services.vision_openai import VisionAnalyzer


def get_analyzer(request: Request) -> VisionAnalyzer:
    """
    Dependency returning the process-wide VisionAnalyzer built at startup.
    Tests swap it out via app.dependency_overrides.
    """
    analyzer = getattr(request.app.state, "analyzer", None)
    if analyzer is None:
        raise AnalyzeError("analyzer not initialized")
    return analyzer
