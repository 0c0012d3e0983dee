from .feedback import FeedbackSchema, data_to_schema, datas_to_schemas
