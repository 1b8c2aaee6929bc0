import os

UPLOADS_DIR = os.getenv("CLIP_UPLOADS_DIR", os.path.join(os.getcwd(), "uploads"))

# =========================
# EXTERNAL TOOLS
# =========================
YTDLP_BIN = os.getenv("YTDLP_BIN", "yt-dlp")
FFMPEG_BIN = os.getenv("FFMPEG_BIN", "ffmpeg")

YTDLP_FORMAT = os.getenv("YTDLP_FORMAT", "bestvideo+bestaudio/best")
YTDLP_MERGE_FORMAT = os.getenv("YTDLP_MERGE_FORMAT", "mp4")
YTDLP_REFERER = os.getenv("YTDLP_REFERER", "https://www.youtube.com/")
YTDLP_USER_AGENT = os.getenv(
    "YTDLP_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36",
)

# seconds, 0 = no deadline
PROCESS_TIMEOUT = float(os.getenv("CLIP_PROCESS_TIMEOUT", "1800"))
STDERR_TAIL = int(os.getenv("CLIP_STDERR_TAIL", "4000"))

# =========================
# HTTP
# =========================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def ensure_dirs():
    os.makedirs(UPLOADS_DIR, exist_ok=True)
