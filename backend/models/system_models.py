"""
System Models for K3s Suite API
"""

from pydantic import BaseModel


class MinikubeActionResponse(BaseModel):
    """Response for minikube start/stop"""
    message: str
    output: str = ""
