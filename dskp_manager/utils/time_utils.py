import pytz
from datetime import datetime
from dskp_manager.config import Config

def get_local_time():
    """
    Returns the current time in Config.TIMEZONE (Asia/Kuala_Lumpur by default) as a naive datetime.
    """
    return datetime.now(pytz.timezone(Config.TIMEZONE)).replace(tzinfo=None)
