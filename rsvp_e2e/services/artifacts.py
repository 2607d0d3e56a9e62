# rsvp_e2e/services/artifacts.py
import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def artifact_slug(nodeid: str) -> str:
    """
    Convierte un node id de pytest en un nombre de archivo seguro.

    "tests/e2e/test_site.py::test_login[chromium]" -> "test_site-test_login-chromium"
    """
    name = nodeid.split("/")[-1].replace(".py", "")
    slug = _UNSAFE.sub("-", name).strip("-")
    return slug or "test"


def should_keep_video(mode: str, failed: bool) -> bool:
    if mode == "on":
        return True
    if mode == "retain-on-failure":
        return failed
    return False


class ArtifactStore:
    """
    Rutas de los artefactos que produce la suite.
    Las capturas con nombre van a screenshots_dir; lo relativo a fallos a results_dir.
    """

    def __init__(self, results_dir: str | Path, screenshots_dir: str | Path):
        self.results_dir = Path(results_dir)
        self.screenshots_dir = Path(screenshots_dir)

    @property
    def video_dir(self) -> Path:
        return self.results_dir / "videos"

    def ensure_dirs(self) -> None:
        for directory in (self.results_dir, self.screenshots_dir, self.video_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def screenshot_path(self, name: str) -> Path:
        if not name.endswith(".png"):
            name = f"{name}.png"
        return self.screenshots_dir / name

    def failure_screenshot_path(self, slug: str) -> Path:
        return self.results_dir / f"{slug}-failure.png"

    def console_log_path(self, slug: str) -> Path:
        return self.results_dir / f"{slug}-console.log"

    def write_console_log(self, slug: str, text: str) -> Path:
        path = self.console_log_path(slug)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Log de consola guardado: {path}")
        return path

    def keep_video(self, video_path: str | Path, slug: str) -> Path:
        source = Path(video_path)
        target = self.video_dir / f"{slug}{source.suffix or '.webm'}"
        target.parent.mkdir(parents=True, exist_ok=True)
        source.replace(target)
        logger.info(f"Video conservado: {target}")
        return target

    def discard_video(self, video_path: str | Path) -> None:
        Path(video_path).unlink(missing_ok=True)


def capture_failure(store: ArtifactStore, slug: str, page, console=None) -> dict:
    """
    Guarda captura de pantalla y log de consola de una prueba fallida.

    Returns:
        Diccionario con "screenshot", "console_log" y "console_text" (los que se pudieron generar)
    """
    saved: dict = {}
    try:
        shot = store.failure_screenshot_path(slug)
        shot.parent.mkdir(parents=True, exist_ok=True)
        page.screenshot(path=str(shot), full_page=True)
        saved["screenshot"] = shot
        logger.info(f"Captura de fallo guardada: {shot}")
    except Exception:
        logger.exception(f"No se pudo capturar la pantalla para {slug}")

    if console is not None:
        text = console.format_report()
        saved["console_text"] = text
        try:
            saved["console_log"] = store.write_console_log(slug, text)
        except OSError:
            logger.exception(f"No se pudo escribir el log de consola para {slug}")
    return saved
