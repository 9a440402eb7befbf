import os
from typing import Any
from dotenv import load_dotenv
from botocore.config import Config as BotoConfig
from pydantic import BaseModel, Field


class Settings(BaseModel):
    aws_region: str = Field(default='us-east-1')
    aws_access_key_id: str = Field(default='')
    aws_secret_access_key: str = Field(default='')
    bucket_name: str = Field(default='')
    local_output_dir: str = Field(default='')
    chromium_executable_path: str = Field(default='')
    screenshot_cache_control: str = Field(default='max-age=31536000')
    log_level: str = Field(default='INFO')

    def model_post_init(self, __context: Any):
        load_dotenv()

        self.aws_region = get('AWS_REGION', 'us-east-1')
        self.aws_access_key_id = get('AWS_ACCESS_KEY_ID', '')
        self.aws_secret_access_key = get('AWS_SECRET_ACCESS_KEY', '')
        # an empty bucket means "write locally only"
        self.bucket_name = get('AWS_S3_BUCKET', '')
        self.local_output_dir = get('LOCAL_OUTPUT_DIR', '')
        self.chromium_executable_path = get('CHROMIUM_EXECUTABLE_PATH', '')
        self.screenshot_cache_control = get('SCREENSHOT_CACHE_CONTROL', 'max-age=31536000')
        self.log_level = get('LOG_LEVEL', 'INFO').upper()

    @property
    def uploads_enabled(self) -> bool:
        return bool(self.bucket_name)

    @property
    def boto_config(self) -> BotoConfig:
        return BotoConfig(
            region_name=self.aws_region,
            retries={'max_attempts': 5, 'mode': 'standard'},
        )


def get(key: str, default: str = '') -> str:
    return os.getenv(key, default)
