import os
import dotenv

dotenv.load_dotenv()

# Largest value a variable length integer can hold
VLV_MAX = (1 << 28) - 1

# Codec used for the text meta events. Undecodable bytes are replaced, the raw bytes are kept for re-encoding.
TEXT_ENCODING = os.getenv("SMFKIT_TEXT_ENCODING", "utf-8")

# Upper bound for a single sysex or meta payload
MAX_PAYLOAD_LENGTH = int(os.getenv("SMFKIT_MAX_PAYLOAD_LENGTH", str(VLV_MAX)))
