PROJECT_NAME = "oncall-ai"
API_V1_STR = "/api/v1"
