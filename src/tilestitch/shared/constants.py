# Внутренний «сверхточный» зум: координаты тайлов считаются на нём,
# а индексы и субпиксельные сдвиги получаются сдвигом битов
PRECISION_BITS = 32

# Дополнительные биты зума для субтайлового выравнивания (256 делений на тайл)
SUBTILE_BITS = 8
SUBTILE_MASK = (1 << SUBTILE_BITS) - 1
SUBTILE_DIVISIONS = 1 << SUBTILE_BITS

# Максимальный зум, при котором zoom + SUBTILE_BITS помещается в PRECISION_BITS
MAX_ZOOM = PRECISION_BITS - SUBTILE_BITS

# Базовый размер тайла Web Mercator (пикселей)
TILE_SIZE = 256

# Сдвиг начала координат сферического Web Mercator (2 * pi * 6378137 / 2)
ORIGIN_SHIFT_M = 20037508.342789244

WORLD_LNG_HALF_SPAN_DEG = 180.0
WORLD_LNG_SPAN_DEG = 360.0
WORLD_LAT_POLE_DEG = 90.0

# Широта края квадрата Web Mercator: atan(sinh(pi)) в градусах
MERCATOR_MAX_LAT = 85.0511287798066

# Максимальное число параллельных HTTP-запросов
ASYNC_MAX_CONCURRENCY = 25

# Таймаут одного HTTP-запроса (секунды; 0 отключает ограничение)
HTTP_TIMEOUT_DEFAULT = 60.0

HTTP_OK = 200

DEFAULT_USER_AGENT = 'tilestitch/1.0 (+https://wiki.openstreetmap.org/wiki/Slippy_map_tilenames)'

# Отключить защиту Pillow от «бомб декомпрессии»: холст может быть огромным
PIL_DISABLE_LIMIT = True

# Качество JPEG по умолчанию
JPEG_QUALITY_DEFAULT = 95

# Формат строки лога
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Коды завершения CLI
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130
