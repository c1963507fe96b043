import json
import sys
from typing import Any, Dict, Optional

from pydub import AudioSegment

from loudness_engine.config import MeterConfig
from loudness_engine.exceptions import LoudnessEngineError
from loudness_engine.meter import LoudnessResult, measure
from loudness_engine.reference import reference_integrated_loudness
from loudness_engine.signal import MultichannelSignal
from loudness_engine.streaming.engine import create_stream
from loudness_engine.utils.formatting import format_db, format_lu, format_time
from loudness_engine.utils.logger import get_logger, setup_logging, setup_logging_from_settings

logger = get_logger(__name__)


def load_settings(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def replay_stream(signal: MultichannelSignal, config: MeterConfig) -> Optional[LoudnessResult]:
    """Feed a decoded signal through a LoudnessStream block by block."""
    stream = create_stream(signal.sample_rate, config=config, prefiltered=False, channels=signal.num_channels)
    block_size = config.stream_block_size
    for start in range(0, signal.num_samples, block_size):
        stream.feed(signal.channels[:, start:start + block_size])
    return stream.stop()


def format_report(result: LoudnessResult) -> str:
    m_max, m_time, _ = result.momentary_max
    s_max, s_time, _ = result.short_term_max
    lines = [
        f"Integrated:     {format_lu(result.integrated_loudness)} LUFS",
        f"Momentary:      {format_lu(result.momentary.current)} LUFS "
        f"(max {format_lu(m_max)} at {format_time(m_time)})",
        f"Short-term:     {format_lu(result.short_term.current)} LUFS "
        f"(max {format_lu(s_max)} at {format_time(s_time)})",
        f"Loudness range: {format_lu(result.loudness_range)} LU",
        f"True peak:      {format_db(result.true_peak_db)} dBTP",
        f"PLR:            {format_lu(result.program_loudness_range)} LU",
        f"DR (approx):    {format_lu(result.dynamic_range)} LU",
    ]
    return "\n".join(lines)


def main(argv=None) -> int:
    argv = sys.argv if argv is None else argv
    if len(argv) < 2:
        print("Usage: python -m loudness_engine.main <audio_file> [settings.json]")
        print("Example: python -m loudness_engine.main audio/mix.wav settings.json")
        return 1

    setup_logging()
    audio_path = argv[1]
    settings_path = argv[2] if len(argv) > 2 else None

    try:
        settings = load_settings(settings_path)
        if "logging" in settings:
            setup_logging_from_settings(settings)
        config = MeterConfig.from_settings(settings)
        meter_cfg = settings.get("meter", {}) or {}
        streaming_enabled = bool((meter_cfg.get("streaming", {}) or {}).get("enabled", False))

        logger.info(f"Decoding: {audio_path}")
        audio = AudioSegment.from_file(audio_path)
        signal = MultichannelSignal.from_audiosegment(audio)
        logger.info(
            f"Decoded {signal.sample_rate} Hz, {signal.num_channels} ch, {signal.duration:.3f} s"
        )

        if streaming_enabled:
            result = replay_stream(signal, config)
        else:
            result = measure(signal, config=config)
    except (LoudnessEngineError, OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to measure {audio_path}: {e}")
        return 1

    if result is None:
        logger.error(f"{audio_path} is shorter than one hop; no measurement emitted")
        return 1

    print(format_report(result))
    if meter_cfg.get("reference"):
        try:
            reference = reference_integrated_loudness(signal)
        except ValueError as e:
            logger.warning(f"Skipping reference measurement: {e}")
        else:
            print(f"Reference (pyloudnorm): {format_lu(reference)} LUFS")

    output_path = meter_cfg.get("json_output")
    if output_path:
        try:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(result.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Failed to write {output_path}: {e}")
            return 1
        logger.info(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
