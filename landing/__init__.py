from landing.config import load_dotenv_if_needed


load_dotenv_if_needed()
