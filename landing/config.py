import os
from pathlib import Path
from typing import List


def load_dotenv_if_needed(path: str = ".env") -> None:
	# Do not auto-load .env during pytest to keep tests offline
	if os.getenv("PYTEST_CURRENT_TEST"):
		return
	env_path = Path(path)
	if not env_path.exists():
		return
	try:
		lines = env_path.read_text(encoding="utf-8").splitlines()
	except OSError:
		return
	for line in lines:
		s = line.strip()
		if not s or s.startswith("#") or "=" not in s:
			continue
		key, val = s.split("=", 1)
		key = key.strip()
		if key.startswith("export "):
			key = key[len("export "):].strip()
		val = val.strip()
		if (val.startswith('"') and val.endswith('"')) or (val.startswith("'") and val.endswith("'")):
			val = val[1:-1]
		# Never overwrite variables already set in the environment
		if key and key not in os.environ:
			os.environ[key] = val


def env_str(name: str, default: str = "") -> str:
	return (os.getenv(name, default) or default).strip()


def env_int(name: str, default: int) -> int:
	try:
		return int(os.getenv(name, str(default)) or default)
	except ValueError:
		return default


def env_float(name: str, default: float) -> float:
	try:
		return float(os.getenv(name, str(default)) or default)
	except ValueError:
		return default


def env_flag(name: str, default: str = "0") -> bool:
	return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def env_list(name: str, default: str = "") -> List[str]:
	return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]
