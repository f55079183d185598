"""Unit tests for command builder functionality

This test suite verifies the construction of ffmpeg commands
for segment interpolation and concatenation.
"""

import unittest
from pathlib import Path

from smoothframes.command_builders import build_concat_command, build_interpolate_command
from smoothframes.models import Segment

class TestCommandBuilders(unittest.TestCase):
    """Test cases for command builder utilities"""
    def test_build_interpolate_command(self):
        segment = Segment(index=1, start=20.0, end=40.0)
        cmd = build_interpolate_command(
            Path("/tmp/input.mp4"), Path("/tmp/out.mp4"), segment, 60, 2
        )
        self.assertEqual(cmd[0], "ffmpeg")
        self.assertIn("minterpolate='fps=60'", cmd)
        self.assertEqual(cmd[cmd.index("-ss") + 1], "20.000000")
        self.assertEqual(cmd[cmd.index("-t") + 1], "20.000000")
        # Seek and thread hint are input options
        self.assertLess(cmd.index("-ss"), cmd.index("-i"))
        self.assertLess(cmd.index("-threads"), cmd.index("-i"))
        self.assertEqual(cmd[cmd.index("-threads") + 1], "2")
        self.assertEqual(cmd[-1], "/tmp/out.mp4")

    def test_build_interpolate_command_custom_fps(self):
        segment = Segment(index=0, start=0.0, end=5.0)
        cmd = build_interpolate_command(
            Path("/tmp/input.mp4"), Path("/tmp/out.mp4"), segment, 120, 4
        )
        self.assertIn("minterpolate='fps=120'", cmd)
        self.assertIn("4", cmd)

    def test_build_concat_command(self):
        cmd = build_concat_command(Path("/tmp/concat-input.mp4.txt"), Path("/tmp/processed-input.mp4"))
        joined = " ".join(cmd)
        self.assertIn("-f concat", joined)
        self.assertIn("-safe 0", joined)
        self.assertIn("-c:v copy", joined)
        self.assertIn("-c:a copy", joined)
        self.assertEqual(cmd[-1], "/tmp/processed-input.mp4")

if __name__ == "__main__":
    unittest.main()
