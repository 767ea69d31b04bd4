# User value: This test makes sure every operation shows up exactly once under its media tab.
import unittest

from schemas.common import MediaType
from schemas.operations import OperationDefinition
from services.operations import (
    describe_formats,
    find_operation,
    group_operations_by_media_type,
    search_operations,
)


def _op(name, media, **kwargs):
    return OperationDefinition.model_validate({"operation_name": name, "media_type": media, **kwargs})


class OperationsUnitTests(unittest.TestCase):
    def setUp(self):
        self.ops = [
            _op("video_compress", "video", description="Shrink a video"),
            _op("image_resize", "image", description="Resize an image"),
            _op("audio_convert", "audio"),
            _op("video_to_gif", "video", input_formats=["mp4"], output_formats=["gif"]),
        ]

    # User value: no operation is lost or listed twice when tabs are built.
    def test_grouping_partitions_operations(self):
        grouped = group_operations_by_media_type(self.ops)
        names = [op.operation_name for media in MediaType for op in grouped.for_media_type(media)]
        self.assertEqual(sorted(names), sorted(op.operation_name for op in self.ops))
        self.assertEqual(len(names), len(set(names)))
        self.assertEqual([op.operation_name for op in grouped.video], ["video_compress", "video_to_gif"])
        self.assertEqual(grouped.audio[0].operation_name, "audio_convert")

    def test_grouping_empty_input(self):
        grouped = group_operations_by_media_type([])
        self.assertEqual((grouped.video, grouped.image, grouped.audio), ([], [], []))

    def test_find_and_search(self):
        self.assertEqual(find_operation(self.ops, "image_resize").media_type, MediaType.IMAGE)
        self.assertIsNone(find_operation(self.ops, "missing"))
        self.assertEqual([op.operation_name for op in search_operations(self.ops, "RESIZE")], ["image_resize"])
        self.assertEqual(len(search_operations(self.ops, "  ")), len(self.ops))

    def test_describe_formats_display_convention(self):
        self.assertEqual(
            describe_formats(self.ops[0]),
            {"media_type": "Video", "input_formats": "Any", "output_formats": "Same as input"},
        )
        self.assertEqual(describe_formats(self.ops[3])["output_formats"], "gif")

    def test_parameter_lookup_and_label(self):
        op = _op(
            "image_resize",
            "image",
            parameters=[{"param_name": "keep_aspect_ratio", "type": "boolean", "default": True}],
        )
        param = op.get_parameter("keep_aspect_ratio")
        self.assertEqual(param.label, "keep aspect ratio")
        self.assertIsNone(op.get_parameter("nope"))


if __name__ == "__main__":
    unittest.main()
