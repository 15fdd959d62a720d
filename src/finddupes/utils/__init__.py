from .convert_utils import ConvertUtils
from .escapes import unescape

__all__ = ["ConvertUtils", "unescape"]
