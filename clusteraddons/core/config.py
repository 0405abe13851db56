from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv(Path(Path(__file__).parent.parent.parent.absolute(), '.env'))

ADMIN_KUBECONFIG_NAME = 'admin.kubeconfig'

READINESS_POLL_INTERVAL_SECONDS = float(os.getenv('READINESS_POLL_INTERVAL_SECONDS', '1'))
READINESS_TIMEOUT_SECONDS = float(os.getenv('READINESS_TIMEOUT_SECONDS', '300'))

IMAGE_FORMAT = os.getenv('IMAGE_FORMAT', 'openshift/origin-${component}:${version}')
IMAGE_VERSION = os.getenv('IMAGE_VERSION', 'latest')
