"""
Unit tests for converting MediaPipe results into DetectionFrames.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from behavior_core import POSE_PARTS, Handedness
from video_pipeline import (
    POSE_LANDMARK_INDICES,
    RawDetections,
    adapt_faces,
    adapt_hands,
    adapt_pose,
    build_detection_frame,
)

from synthetic_detections import (
    fake_face_results,
    fake_hand_results,
    fake_pose_results,
    unclassified_hand_results,
)


class TestAdaptPose:
    """Test pose conversion."""

    def test_landmark_mapping_covers_all_parts(self):
        assert set(POSE_LANDMARK_INDICES) == set(POSE_PARTS)

    def test_scaled_to_pixels(self):
        pose = adapt_pose(fake_pose_results(), (640, 480))

        assert len(pose.keypoints) == 17
        nose = pose.get('nose')
        assert nose.x == pytest.approx(320.0)
        assert nose.y == pytest.approx(240.0)
        assert nose.score == pytest.approx(0.8)

    def test_pose_score_is_mean_visibility(self):
        landmarks = [(0.5, 0.5, 0.8)] * 33
        landmarks[0] = (0.1, 0.2, 0.0)
        pose = adapt_pose(fake_pose_results(landmarks), (100, 100))

        assert pose.get('nose').score == 0.0
        assert pose.score == pytest.approx(0.8 * 16 / 17)

    def test_uses_mediapipe_indices(self):
        landmarks = [(0.0, 0.0, 0.5)] * 33
        landmarks[23] = (0.25, 0.75, 0.9)
        pose = adapt_pose(fake_pose_results(landmarks), (200, 100))

        left_hip = pose.get('leftHip')
        assert left_hip.x == pytest.approx(50.0)
        assert left_hip.y == pytest.approx(75.0)

    def test_no_person(self):
        results = fake_pose_results()
        results.pose_landmarks = None

        assert adapt_pose(results, (640, 480)) is None
        assert adapt_pose(None, (640, 480)) is None


class TestAdaptFaces:
    """Test face conversion."""

    def test_box_and_landmarks(self):
        faces = adapt_faces(fake_face_results([(0.1, 0.2, 0.3, 0.4, 0.9)]))

        assert len(faces) == 1
        face = faces[0]
        assert face.x_min == pytest.approx(0.1)
        assert face.y_min == pytest.approx(0.2)
        assert face.x_max == pytest.approx(0.4)
        assert face.y_max == pytest.approx(0.6)
        assert face.score == pytest.approx(0.9)
        assert len(face.landmarks) == 6

    def test_order_preserved(self):
        faces = adapt_faces(fake_face_results([
            (0.1, 0.1, 0.2, 0.2, 0.6),
            (0.5, 0.5, 0.2, 0.2, 0.9),
        ]))

        assert [f.score for f in faces] == pytest.approx([0.6, 0.9])

    def test_no_faces(self):
        assert adapt_faces(fake_face_results([])) == []
        assert adapt_faces(None) == []


class TestAdaptHands:
    """Test hand conversion."""

    def test_two_hands(self):
        hands = adapt_hands(fake_hand_results([('Left', 0.9, 0.0), ('Right', 0.7, 0.3)]))

        assert [h.handedness for h in hands] == [Handedness.LEFT, Handedness.RIGHT]
        assert hands[1].score == pytest.approx(0.7)
        assert len(hands[0].landmarks) == 21
        assert hands[1].landmarks[0].x == pytest.approx(0.5)
        assert hands[0].landmarks[0].z == pytest.approx(-0.01)

    def test_unknown_label_skipped(self):
        hands = adapt_hands(fake_hand_results([('Unknown', 0.9, 0.0), ('Left', 0.8, 0.0)]))

        assert len(hands) == 1
        assert hands[0].handedness == Handedness.LEFT

    def test_hand_without_classification_skipped(self):
        assert adapt_hands(unclassified_hand_results()) == []

    def test_no_hands(self):
        assert adapt_hands(fake_hand_results([])) == []
        assert adapt_hands(None) == []


class TestBuildDetectionFrame:
    """Test frame assembly."""

    def test_models_not_loaded(self):
        frame = build_detection_frame(None, (640, 480), timestamp=12.5)

        assert frame.is_empty
        assert frame.timestamp == 12.5

    def test_full_frame(self):
        raw = RawDetections(
            pose=fake_pose_results(),
            face=fake_face_results([(0.4, 0.4, 0.2, 0.2, 0.95)]),
            hands=fake_hand_results([('Right', 0.9, 0.0)])
        )

        frame = build_detection_frame(raw, (640, 480), timestamp=1.0)

        assert frame.pose is not None
        assert len(frame.faces) == 1
        assert len(frame.hands) == 1
        assert not frame.is_empty

    def test_nothing_detected(self):
        pose_results = fake_pose_results()
        pose_results.pose_landmarks = None
        raw = RawDetections(
            pose=pose_results,
            face=fake_face_results([]),
            hands=fake_hand_results([])
        )

        frame = build_detection_frame(raw, (640, 480))

        assert frame.is_empty
        assert frame.timestamp > 0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
