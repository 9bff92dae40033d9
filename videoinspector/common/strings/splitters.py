from typing import List

def csv_to_list(v: str | List[str] | None) -> List[str]:
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if s is not None and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]

def csv_to_floats(v: str | List[float] | List[str] | None) -> List[float]:
    """Parse "0.1, 0.3" (or a list of numbers/strings) into floats. Raises ValueError on junk."""
    if v is None:
        return []
    if isinstance(v, (int, float)):
        return [float(v)]
    return [float(s) for s in csv_to_list(v)]
