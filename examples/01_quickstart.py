"""
lambcrud クイックスタート

インメモリバックエンドで create / read / update / delete / echo を試します。
"""

import json

from lambcrud import InMemoryDataAccess, UnrecognizedOperationError, create_lambda_handler

store = InMemoryDataAccess()
store.create_table("lambda-apigateway", hash_key="id")

lambda_handler = create_lambda_handler(store)


def show(title, event):
    print(f"--- {title}")
    print(json.dumps(lambda_handler(event, None), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    show(
        "create",
        {
            "operation": "create",
            "tableName": "lambda-apigateway",
            "payload": {"Item": {"id": "1234ABCD", "number": 5}},
        },
    )
    show(
        "read",
        {
            "operation": "read",
            "tableName": "lambda-apigateway",
            "payload": {"Key": {"id": "1234ABCD"}},
        },
    )
    show(
        "update",
        {
            "operation": "update",
            "tableName": "lambda-apigateway",
            "payload": {
                "Key": {"id": "1234ABCD"},
                "UpdateExpression": "SET #n = :n",
                "ExpressionAttributeNames": {"#n": "number"},
                "ExpressionAttributeValues": {":n": 10},
                "ReturnValues": "ALL_NEW",
            },
        },
    )
    show(
        "delete",
        {
            "operation": "delete",
            "tableName": "lambda-apigateway",
            "payload": {"Key": {"id": "1234ABCD"}},
        },
    )
    show("echo", {"operation": "echo", "payload": {"somekey1": "somevalue1"}})

    try:
        lambda_handler({"operation": "list", "tableName": "lambda-apigateway"}, None)
    except UnrecognizedOperationError as e:
        print(f"--- list\n{e}")
