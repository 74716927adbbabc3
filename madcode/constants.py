"""Mathematical constants and spline flow settings."""

PI = 3.14159265358979323846
LOG_TWO = 0.69314718055994530942
SQRT_HALF = 0.70710678118654752440
TWO_DIV_SQRT_PI = 1.12837916709551257390

MIN_BIN_SIZE = 1e-3
MIN_DERIVATIVE = 1e-3