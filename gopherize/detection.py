# gopherize/detection.py
"""
Face detection backends.

The pipeline only needs something with ``detect(image_bytes)`` returning the
faces in service order; ``FaceDetector`` names that capability.
"""

from typing import List, Optional, Protocol

import requests
from pydantic import ValidationError

from .errors import ServiceError, ServiceUnavailable
from .logger import console
from .models import (
    AnnotateFeature,
    AnnotateImage,
    AnnotateRequest,
    AnnotateRequestBody,
    AnnotateResponseBody,
    DetectionResult,
    FaceLandmarks,
)
from .utils import bytes_to_base64


class FaceDetector(Protocol):
    def detect(self, image_bytes: bytes) -> DetectionResult:
        ...


class StaticFaceDetector:
    """Returns the same faces for every image."""

    def __init__(self, faces: Optional[List[FaceLandmarks]] = None):
        self.faces = list(faces or [])
        self.calls = 0

    def detect(self, image_bytes: bytes) -> DetectionResult:
        self.calls += 1
        return list(self.faces)


class VisionAPIDetector:
    """
    Calls the Cloud Vision ``images:annotate`` REST endpoint with a
    FACE_DETECTION feature and converts the first response's face
    annotations into ``FaceLandmarks``.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        timeout: float = 30.0,
        max_results: int = 0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.max_results = max_results
        self.session = session

    def build_request(self, image_bytes: bytes) -> dict:
        feature = AnnotateFeature(
            type="FACE_DETECTION",
            maxResults=self.max_results if self.max_results > 0 else None,
        )
        body = AnnotateRequestBody(
            requests=[
                AnnotateRequest(
                    image=AnnotateImage(content=bytes_to_base64(image_bytes)),
                    features=[feature],
                )
            ]
        )
        return body.model_dump(exclude_none=True)

    def detect(self, image_bytes: bytes) -> DetectionResult:
        post = self.session.post if self.session is not None else requests.post
        try:
            resp = post(
                self.endpoint,
                params={"key": self.api_key},
                json=self.build_request(image_bytes),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            console.log(f"[red]failed to get response from cloud vision api: {exc}[/red]")
            raise ServiceUnavailable(f"vision api unreachable: {exc}") from exc

        if resp.status_code >= 400:
            raise ServiceError(
                f"vision api returned HTTP {resp.status_code}: {resp.text[:200]}"
            )

        try:
            body = AnnotateResponseBody.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise ServiceError(f"failed to parse vision api response: {exc}") from exc

        if not body.responses:
            raise ServiceError("vision api returned no responses")
        first = body.responses[0]
        if first.error is not None and (first.error.code or first.error.message):
            raise ServiceError(
                f"vision api error {first.error.code}: {first.error.message}"
            )

        faces = [annotation.to_face_landmarks() for annotation in first.faceAnnotations]
        console.log(f"[blue]Vision API found {len(faces)} face(s)[/blue]")
        return faces
