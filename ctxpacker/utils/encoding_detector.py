# ctxpacker/utils/encoding_detector.py

import chardet
from ctxpacker.utils.logger import logger

SNIFF_BYTES = 10000


def detect_file_encoding(file_path: str) -> str:
    """
    Detect the encoding of a file.

    Args:
        file_path (str): Path to the file

    Returns:
        str: Detected encoding or 'utf-8' as fallback
    """
    try:
        with open(file_path, 'rb') as f:
            raw = f.read(SNIFF_BYTES)
        # Fast path: UTF-8 is common; if it decodes, use it without chardet
        try:
            raw.decode('utf-8')
            return 'utf-8'
        except UnicodeDecodeError as e:
            # multi-byte sequence cut off by the sniff window
            if len(raw) == SNIFF_BYTES and e.start >= SNIFF_BYTES - 3:
                return 'utf-8'
        result = chardet.detect(raw)
        return result.get('encoding') or 'utf-8'
    except OSError as e:
        logger.error(f"Failed to detect encoding for {file_path}: {str(e)}")
        return 'utf-8'
