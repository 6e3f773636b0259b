
from vela_installer.main import main_entry

main_entry()
