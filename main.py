# main.py

from dotenv import load_dotenv
load_dotenv(override=True)

from tally_dashboard import create_app

# Uvicorn memanggil factory ini (factory=True)
app = create_app
