from rolesync import ComponentContext, JSONFileStateStore, reconcile, remove



def main():
    # Example usage: deploy a Lambda execution role, then tear it down
    ctx = ComponentContext(state=JSONFileStateStore(".rolesync/example-role.json"))

    outputs = reconcile(
        {
            "service": "lambda.amazonaws.com",
            "policy": {"arn": "arn:aws:iam::aws:policy/AWSLambdaExecute"},
            "region": "us-east-1",
        },
        ctx,
    )
    print(f"Deployed: {outputs}")

    print(f"Removed: {remove(ctx)}")

if __name__ == "__main__":
    main()
