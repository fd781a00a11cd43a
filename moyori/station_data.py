"""
Built-in station pool used when a request does not supply its own.
Coordinates are approximate platform centres.
"""

from moyori.stations import Station


STATIONS = [
    # 東京都内主要駅
    Station('東京', 35.681236, 139.767125, '東京都', 'JR山手線'),
    Station('新宿', 35.690921, 139.700258, '東京都', 'JR山手線'),
    Station('渋谷', 35.658034, 139.701636, '東京都', 'JR山手線'),
    Station('池袋', 35.729503, 139.710900, '東京都', 'JR山手線'),
    Station('品川', 35.628471, 139.738760, '東京都', 'JR山手線'),
    Station('上野', 35.713768, 139.777254, '東京都', 'JR山手線'),
    Station('秋葉原', 35.698683, 139.774219, '東京都', 'JR山手線'),
    Station('神田', 35.691690, 139.770883, '東京都', 'JR山手線'),
    Station('有楽町', 35.675069, 139.763328, '東京都', 'JR山手線'),
    Station('新橋', 35.666195, 139.758587, '東京都', 'JR山手線'),
    Station('浜松町', 35.655646, 139.757101, '東京都', 'JR山手線'),
    Station('田町', 35.645736, 139.747575, '東京都', 'JR山手線'),
    Station('恵比寿', 35.646690, 139.710106, '東京都', 'JR山手線'),
    Station('目黒', 35.633998, 139.715828, '東京都', 'JR山手線'),
    Station('原宿', 35.670168, 139.702687, '東京都', 'JR山手線'),
    Station('代々木', 35.683061, 139.702042, '東京都', 'JR山手線'),
    Station('高田馬場', 35.712285, 139.703782, '東京都', 'JR山手線'),
    Station('四ツ谷', 35.686041, 139.730644, '東京都', 'JR中央線'),
    Station('市ケ谷', 35.691173, 139.735813, '東京都', 'JR中央線'),
    Station('飯田橋', 35.702083, 139.745023, '東京都', 'JR中央線'),
    Station('水道橋', 35.702039, 139.753388, '東京都', 'JR中央線'),
    Station('御茶ノ水', 35.699619, 139.765081, '東京都', 'JR中央線'),

    # 神奈川県主要駅
    Station('横浜', 35.465798, 139.622314, '神奈川県', 'JR東海道本線'),
    Station('川崎', 35.530834, 139.697022, '神奈川県', 'JR東海道本線'),
    Station('藤沢', 35.340534, 139.489316, '神奈川県', 'JR東海道本線'),

    # 埼玉県主要駅
    Station('大宮', 35.906715, 139.623514, '埼玉県', 'JR京浜東北線'),
    Station('浦和', 35.861729, 139.644943, '埼玉県', 'JR京浜東北線'),

    # 千葉県主要駅
    Station('千葉', 35.607406, 140.106526, '千葉県', 'JR総武線'),
    Station('船橋', 35.695541, 139.984627, '千葉県', 'JR総武線'),

    # 大阪府主要駅
    Station('大阪', 34.702485, 135.495951, '大阪府', 'JR大阪環状線'),
    Station('難波', 34.665843, 135.500713, '大阪府', '南海本線'),
    Station('天王寺', 34.645283, 135.506633, '大阪府', 'JR大阪環状線'),

    # 兵庫県主要駅
    Station('神戸', 34.679456, 135.178066, '兵庫県', 'JR東海道本線'),
    Station('西宮', 34.740617, 135.341767, '兵庫県', 'JR東海道本線'),

    # 京都府主要駅
    Station('京都', 34.985849, 135.758767, '京都府', 'JR東海道本線'),

    # 愛知県主要駅
    Station('名古屋', 35.170915, 136.881537, '愛知県', 'JR東海道本線'),

    # 福岡県主要駅
    Station('博多', 33.590355, 130.420590, '福岡県', 'JR鹿児島本線'),
]
