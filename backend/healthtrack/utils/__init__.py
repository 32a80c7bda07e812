from .encryption import encrypt_phi, decrypt_phi, hash_email
from .audit_logger import audit_log, audit_phi_access
from .auth import generate_token, token_required
from .formatting import format_timestamp, parse_timestamp, to_iso
