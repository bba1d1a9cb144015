# gopherize/models.py
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .errors import LandmarkNotFound


class LandmarkType(str, Enum):
    LEFT_EYE = "LEFT_EYE"
    RIGHT_EYE = "RIGHT_EYE"
    NOSE_TIP = "NOSE_TIP"
    MOUTH_LEFT = "MOUTH_LEFT"
    MOUTH_RIGHT = "MOUTH_RIGHT"


class Point(BaseModel):
    # Vision omits zero-valued coordinates on the wire
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0  # depth, unused by compositing


class FaceLandmarks(BaseModel):
    """Named landmark positions for one detected face.

    A name that is not a key of ``landmarks`` was not detected, which keeps
    "missing" apart from a landmark sitting at (0, 0).
    """

    landmarks: Dict[LandmarkType, Point] = {}

    def get(self, name: Union[str, LandmarkType]) -> Point:
        try:
            return self.landmarks[LandmarkType(name)]
        except (KeyError, ValueError):
            raise LandmarkNotFound(str(getattr(name, "value", name))) from None

    def __contains__(self, name: Union[str, LandmarkType]) -> bool:
        try:
            return LandmarkType(name) in self.landmarks
        except ValueError:
            return False


# Faces in the order the detection service returned them
DetectionResult = List[FaceLandmarks]


# ==========================
# VISION images:annotate SCHEMAS
# ==========================

class AnnotateImage(BaseModel):
    content: str  # base64


class AnnotateFeature(BaseModel):
    type: str = "FACE_DETECTION"
    maxResults: Optional[int] = None


class AnnotateRequest(BaseModel):
    image: AnnotateImage
    features: List[AnnotateFeature]


class AnnotateRequestBody(BaseModel):
    requests: List[AnnotateRequest]


class AnnotateLandmark(BaseModel):
    type: str = ""
    position: Point = Field(default_factory=Point)


class FaceAnnotation(BaseModel):
    landmarks: List[AnnotateLandmark] = []

    def to_face_landmarks(self) -> FaceLandmarks:
        """Keep the landmark types we draw on; the first occurrence wins."""
        found: Dict[LandmarkType, Point] = {}
        for landmark in self.landmarks:
            try:
                kind = LandmarkType(landmark.type)
            except ValueError:
                continue
            found.setdefault(kind, landmark.position)
        return FaceLandmarks(landmarks=found)


class AnnotateStatus(BaseModel):
    code: int = 0
    message: str = ""


class AnnotateResponse(BaseModel):
    faceAnnotations: List[FaceAnnotation] = []
    error: Optional[AnnotateStatus] = None


class AnnotateResponseBody(BaseModel):
    responses: List[AnnotateResponse] = []
