import pytest

from gopherize.errors import LandmarkNotFound
from gopherize.models import AnnotateResponseBody, FaceLandmarks, LandmarkType, Point
from conftest import make_face


def test_get_returns_point():
    face = make_face(LEFT_EYE=(1.5, 2.5))
    assert face.get("LEFT_EYE") == Point(x=1.5, y=2.5)
    assert face.get(LandmarkType.LEFT_EYE).y == 2.5


def test_missing_landmark_raises():
    face = make_face(LEFT_EYE=(1, 2))
    with pytest.raises(LandmarkNotFound) as excinfo:
        face.get(LandmarkType.RIGHT_EYE)
    assert excinfo.value.name == "RIGHT_EYE"
    assert "RIGHT_EYE" in str(excinfo.value)


def test_unknown_landmark_name_is_not_found():
    with pytest.raises(LandmarkNotFound):
        FaceLandmarks().get("CHIN_GNATHION")


def test_zero_point_is_not_missing():
    face = make_face(NOSE_TIP=(0, 0))
    assert "NOSE_TIP" in face
    assert face.get("NOSE_TIP") == Point()
    assert "MOUTH_LEFT" not in face


def test_annotation_parsing():
    body = AnnotateResponseBody.model_validate(
        {
            "responses": [
                {
                    "faceAnnotations": [
                        {
                            "landmarks": [
                                {"type": "LEFT_EYE", "position": {"x": 10.5, "y": 20}},
                                {"type": "LEFT_EYE", "position": {"x": 99, "y": 99}},
                                {"type": "LEFT_EYE_PUPIL", "position": {"x": 11, "y": 21}},
                                {"type": "RIGHT_EYE", "position": {"y": 20, "z": -3.2}},
                            ],
                            "detectionConfidence": 0.98,
                        },
                        {},
                    ]
                }
            ]
        }
    )
    faces = [a.to_face_landmarks() for a in body.responses[0].faceAnnotations]
    assert len(faces) == 2
    first, second = faces
    # first occurrence wins, unknown types dropped
    assert first.get("LEFT_EYE") == Point(x=10.5, y=20)
    # omitted x comes back as zero
    assert first.get("RIGHT_EYE") == Point(x=0, y=20, z=-3.2)
    assert set(first.landmarks) == {LandmarkType.LEFT_EYE, LandmarkType.RIGHT_EYE}
    assert second.landmarks == {}


def test_response_without_faces():
    body = AnnotateResponseBody.model_validate({"responses": [{}]})
    assert body.responses[0].faceAnnotations == []
    assert body.responses[0].error is None
