import re

# Windows reserves these regardless of extension
RESERVED_NAMES = {"CON", "PRN", "AUX", "NUL"} | {f"COM{i}" for i in range(1, 10)} | {f"LPT{i}" for i in range(1, 10)}
MAX_NAME_LENGTH = 200


def sanitize_name(name: str, fallback: str = "untitled") -> str:
    """폴더명/파일명에 부적절한 문자를 제거/치환하여 안전한 이름 반환

    Distinct inputs may map to the same output (e.g. ``a:b`` and ``a*b``).
    """
    if not name:
        return fallback
    # 1. 제어문자 및 개행 제거
    name = re.sub(r'[\x00-\x1f\x7f]', '', name)
    # 2. Windows/Linux 파일시스템 금지 문자 치환
    name = re.sub(r'[\\/:*?"<>|]', '_', name)
    # 3. 연속 공백 정리
    name = re.sub(r'\s+', ' ', name).strip()
    # 4. 선두/말미 점(.) 제거 (Windows 예약)
    name = name.strip('. ')
    # 5. 길이 제한 (NTFS 최대 255자)
    if len(name) > MAX_NAME_LENGTH:
        name = name[:MAX_NAME_LENGTH].rstrip('. ')
    if name.upper() in RESERVED_NAMES:
        name = f"{name}_"
    return name if name else fallback
