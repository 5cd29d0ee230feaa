"""
Unit tests for the command line entry point.
"""
from unittest.mock import AsyncMock, MagicMock, patch

from viralcuts.cli import main
from viralcuts.core.errors import PipelineError
from viralcuts.workers.clip_pipeline import ClipResult, PipelineResult


def make_pipeline(result=None, error=None):
    pipeline = MagicMock()
    pipeline.run = AsyncMock(return_value=result, side_effect=error)
    return pipeline


class TestCli:
    """Tests for viralcuts.cli.main."""

    def test_missing_file_exits_1(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.mp4")]) == 1
        assert "file not found" in capsys.readouterr().err

    @patch("viralcuts.cli.build_default_pipeline")
    def test_success_prints_clips(self, mock_build, tmp_path, capsys):
        video = tmp_path / "talk.mp4"
        video.write_bytes(b"video")
        mock_build.return_value = make_pipeline(result=PipelineResult(
            source_path=str(video),
            working_path=str(video),
            clips=[ClipResult("chunk0_a", "output/talk_chunk0_a.mp4", 10, 60, "The hook", 90)]
        ))

        assert main([str(video), "--output-dir", str(tmp_path / "out")]) == 0

        out = capsys.readouterr().out
        assert "Generated 1 clips" in out
        assert "The hook" in out
        mock_build.assert_called_once_with(output_dir=str(tmp_path / "out"))

    @patch("viralcuts.cli.build_default_pipeline")
    def test_pipeline_failure_exits_1(self, mock_build, tmp_path):
        video = tmp_path / "talk.mp4"
        video.write_bytes(b"video")
        mock_build.return_value = make_pipeline(error=PipelineError("silence_removal", "bad input"))

        assert main([str(video)]) == 1

    @patch("viralcuts.cli.build_default_pipeline")
    def test_compilation_flag(self, mock_build, tmp_path):
        video = tmp_path / "talk.mp4"
        video.write_bytes(b"video")
        pipeline = make_pipeline(result=PipelineResult(source_path=str(video), working_path=str(video)))
        mock_build.return_value = pipeline

        main([str(video), "--compilation"])

        pipeline.run.assert_awaited_once_with(str(video), build_compilation=True)
