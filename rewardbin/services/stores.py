"""Store proximity filtering"""

from typing import List, Optional, Sequence, Tuple

from rewardbin.models import Store
from rewardbin.utils.helpers import calculate_distance


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great circle distance in kilometers"""
    return calculate_distance(lat1, lng1, lat2, lng2)


def filter_by_distance(
    stores: Sequence[Store],
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
) -> List[Tuple[Store, Optional[float]]]:
    """
    Keep stores within radius km of (lat, lng)

    Filtering only happens when lat, lng and radius are all given.
    Otherwise every store is returned with a distance of None.
    """
    if lat is None or lng is None or radius is None:
        return [(store, None) for store in stores]

    matches = []
    for store in stores:
        distance = haversine_km(lat, lng, store.lat, store.lng)
        if distance <= radius:
            matches.append((store, distance))
    return matches
