import logging
from typing import Dict, List, Optional

import requests

from moyori.geo_math import InvalidInput
from moyori.stations import Station


logger = logging.getLogger(__name__)

HEARTRAILS_API_BASE = 'https://express.heartrails.com/api/json'
REQUEST_TIMEOUT = 10

PREFECTURES = [
    '北海道', '青森県', '岩手県', '宮城県', '秋田県', '山形県', '福島県',
    '茨城県', '栃木県', '群馬県', '埼玉県', '千葉県', '東京都', '神奈川県',
    '新潟県', '富山県', '石川県', '福井県', '山梨県', '長野県', '岐阜県',
    '静岡県', '愛知県', '三重県', '滋賀県', '京都府', '大阪府', '兵庫県',
    '奈良県', '和歌山県', '鳥取県', '島根県', '岡山県', '広島県', '山口県',
    '徳島県', '香川県', '愛媛県', '高知県', '福岡県', '佐賀県', '長崎県',
    '熊本県', '大分県', '宮崎県', '鹿児島県', '沖縄県',
]


def _to_station(raw: Dict) -> Station:
    # HeartRails reports x = longitude, y = latitude as strings
    return Station.from_dict({
        'name': raw.get('name'),
        'lat': raw.get('y'),
        'lng': raw.get('x'),
        'prefecture': raw.get('prefecture'),
        'line': raw.get('line'),
    })


class StationDirectory:
    """
    Thin client for the HeartRails Express station directory.
    Failures are logged and answered with an empty result, never raised.
    """

    def __init__(self, base_url: str = HEARTRAILS_API_BASE, session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.session = session or requests.Session()

    def _get(self, params: Dict) -> Dict:
        response = self.session.get(self.base_url, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json().get('response') or {}

    def _get_stations(self, params: Dict, what: str) -> List[Station]:
        try:
            stations = self._get(params).get('station') or []
            return [_to_station(s) for s in stations]
        except (requests.RequestException, ValueError, InvalidInput) as e:
            logger.error(f"Failed to fetch {what}: {e}")
            return []

    def get_routes(self, prefecture: str) -> List[str]:
        """Route (line) names in a prefecture"""
        try:
            return list(self._get({'method': 'getLines', 'prefecture': prefecture}).get('line') or [])
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to fetch routes: {e}")
            return []

    def get_stations(self, line: str) -> List[Station]:
        return self._get_stations({'method': 'getStations', 'line': line}, 'stations')

    def search_stations(self, query: str) -> List[Station]:
        """Free-text station name search"""
        query = (query or '').strip()
        if not query:
            return []
        return self._get_stations({'method': 'getStations', 'name': query}, 'station search results')

    def get_nearest_station(self, lat: float, lng: float) -> Optional[Station]:
        stations = self._get_stations({'method': 'getStations', 'x': lng, 'y': lat}, 'nearest station')
        return stations[0] if stations else None
