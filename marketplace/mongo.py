# marketplace/mongo.py
import os

from flask_pymongo import PyMongo
from pymongo.errors import PyMongoError

# Shared client. Services never touch it directly; they go through
# marketplace.records, which treats an unset client as "storage down".
mongo = PyMongo()


def init_mongo(app):
    uri = app.config.get("MONGO_URI") or os.getenv("MONGO_URI")
    if not uri:
        print("⚠️ No MONGO_URI configured, marketplace runs without storage")
        return mongo

    app.config["MONGO_URI"] = uri
    try:
        mongo.init_app(app)
    except (PyMongoError, ValueError) as e:
        print(f"⚠️ Could not set up Mongo client for {uri!r}: {e}")
        return mongo

    print(f"✅ Mongo client ready (db: {getattr(mongo.db, 'name', None)})")
    return mongo
