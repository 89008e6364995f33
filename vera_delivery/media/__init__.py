"""Media probing, transcoding and PCM decoding.

Transcription preparation lives in :mod:`vera_delivery.media.preparation`;
it is not re-exported here because it depends on the chunking package, which
itself builds on these FFmpeg wrappers.
"""

from .ffmpeg import MediaProbe, decode_pcm, probe_media, transcode

__all__ = [
    "MediaProbe",
    "decode_pcm",
    "probe_media",
    "transcode",
]
